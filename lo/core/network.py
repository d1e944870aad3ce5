"""LaraOps network checks"""
import dns.exception
import dns.resolver
import requests

from lo.core.logging import Log
from lo.core.variables import LOVar


class LONetwork():
    """Connectivity, public address and DNS lookups"""

    def is_online(self, url=LOVar.lo_connectivity_url, timeout=5):
        """True when an HTTP request to url gets any answer"""
        try:
            requests.get(url, timeout=timeout)
        except requests.RequestException as e:
            Log.debug(self, "connectivity check failed: {0}".format(e))
            return False
        return True

    def public_ip(self, url=LOVar.lo_public_ip_url, timeout=10):
        """Public IPv4 of this server as seen by an IP echo service"""
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            Log.debug(self, "public ip lookup failed: {0}".format(e))
            return None
        return response.text.strip() or None

    def resolve_a(self, domain, nameserver=None, timeout=10):
        """IPv4 addresses of domain, empty when it cannot be resolved.

        Uses the system resolver unless nameserver is given.
        """
        try:
            resolver = dns.resolver.Resolver()
            if nameserver:
                resolver.nameservers = [nameserver]
            answer = resolver.resolve(domain, 'A', lifetime=timeout)
        except dns.exception.DNSException as e:
            Log.debug(self, "dns lookup failed for {0}: {1}".format(domain, e))
            return []
        return [str(record) for record in answer]

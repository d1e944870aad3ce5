"""LaraOps domain and input validation"""
import re

DOMAIN_RE = re.compile(r'^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
IPV4_RE = re.compile(r'^[0-9]{1,3}(\.[0-9]{1,3}){3}$')
PROJECT_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')
DB_IDENT_RE = re.compile(r'^[A-Za-z0-9_]{1,64}$')
ALIAS_RE = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]*$')
SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.-]*://')
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$')

MIN_PASSWORD_LENGTH = 8


class LODomain():
    """Domain validation"""

    def validate(self, url):
        """Lowercase a domain and strip a leading scheme and trailing slash"""
        url = url.strip().lower()
        url = SCHEME_RE.sub('', url)
        return url.rstrip('/')

    @staticmethod
    def is_valid(domain):
        if not DOMAIN_RE.match(domain):
            return False
        return '..' not in domain and not domain.startswith(('.', '-'))


def is_ipv4(address):
    """IPv4 literal with every octet in 0-255"""
    if not IPV4_RE.match(address):
        return False
    return all(int(octet) <= 255 for octet in address.split('.'))


def is_project_name(name):
    return bool(PROJECT_RE.match(name)) and name not in ('.', '..')


def is_db_identifier(name):
    return bool(DB_IDENT_RE.match(name))


def is_alias(alias):
    return bool(ALIAS_RE.match(alias))


def is_email(address):
    return bool(EMAIL_RE.match(address))

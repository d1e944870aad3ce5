"""Installation plan and run state"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from lo.core.rollback import RollbackLedger
from lo.core.variables import LOVar

SCAFFOLD = 'scaffold'
CLONE = 'clone'


@dataclass(frozen=True)
class SiteConfiguration:
    """Nginx virtual host of one project"""
    project_name: str
    domain: str
    public_dir: str
    php_socket: str
    admin_snippet: str
    path: str
    link: str


@dataclass(frozen=True)
class AdminPanelOptions:
    """phpMyAdmin location and its access controls"""
    alias: str = 'pma'
    auth_user: str = ''
    auth_password: str = ''
    allowed_ips: Tuple[str, ...] = ()

    @property
    def basic_auth(self) -> bool:
        return bool(self.auth_user)

    @property
    def has_access_control(self) -> bool:
        return self.basic_auth or bool(self.allowed_ips)


@dataclass(frozen=True)
class InstallationPlan:
    """Everything the operator decided, collected once before any change"""
    project_name: str
    domain: str
    php_version: str = LOVar.lo_php_default
    install_method: str = SCAFFOLD
    repo_url: str = ''
    branch: str = 'main'
    use_database: bool = False
    db_name: str = ''
    db_user: str = ''
    db_password: str = ''
    run_migrations: bool = True
    run_seeders: bool = True
    certificate_email: str = ''
    admin_panel: Optional[AdminPanelOptions] = None
    webroot: str = LOVar.lo_webroot

    @property
    def project_dir(self) -> str:
        return os.path.join(self.webroot, self.project_name)

    @property
    def public_dir(self) -> str:
        return os.path.join(self.project_dir, 'public')

    @property
    def env_file(self) -> str:
        return os.path.join(self.project_dir, '.env')

    @property
    def site_config(self) -> str:
        return os.path.join(LOVar.lo_nginx_available,
                            '{0}.conf'.format(self.project_name))

    @property
    def site_link(self) -> str:
        return os.path.join(LOVar.lo_nginx_enabled,
                            '{0}.conf'.format(self.project_name))

    @property
    def admin_snippet(self) -> str:
        return os.path.join(LOVar.lo_nginx_snippets,
                            '{0}-admin.conf'.format(self.project_name))

    @property
    def php_socket(self) -> str:
        return LOVar.php_socket(self.php_version)

    @property
    def site(self) -> SiteConfiguration:
        return SiteConfiguration(
            project_name=self.project_name, domain=self.domain,
            public_dir=self.public_dir, php_socket=self.php_socket,
            admin_snippet=self.admin_snippet, path=self.site_config,
            link=self.site_link)

    def app_url(self, https=False) -> str:
        return '{0}://{1}'.format('https' if https else 'http', self.domain)


class CertState(Enum):
    SKIPPED = 'skipped'
    ISSUED = 'issued'
    ISSUE_FAILED = 'issue_failed'


@dataclass(frozen=True)
class CertStatus:
    state: CertState
    reason: str = ''

    @classmethod
    def skipped(cls, reason):
        return cls(CertState.SKIPPED, reason)

    @classmethod
    def issued(cls):
        return cls(CertState.ISSUED)

    @classmethod
    def issue_failed(cls, reason):
        return cls(CertState.ISSUE_FAILED, reason)

    @property
    def is_issued(self) -> bool:
        return self.state is CertState.ISSUED


@dataclass
class RunContext:
    """Mutable state of one install run"""
    plan: InstallationPlan
    ledger: RollbackLedger = field(default_factory=RollbackLedger)
    step: str = ''
    cert_status: Optional[CertStatus] = None
    advisories: List[str] = field(default_factory=list)
    rollback_failures: int = 0
    public_ip_url: str = LOVar.lo_public_ip_url
    timeout: Optional[float] = None

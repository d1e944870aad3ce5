"""Stack Plugin for LaraOps

Installs the PHP, Nginx and MySQL stack a Laravel application runs on,
plus Composer. Every component is skipped when already present so the
installer can be re-run safely.
"""

import glob
import os
import stat
from typing import Any, List, Optional

from cement.core.controller import CementBaseController, expose

from lo.core import exc
from lo.core.aptget import LOAptGet
from lo.core.config import command_timeout, config_value
from lo.core.download import LODownload
from lo.core.fileutils import LOFileUtils
from lo.core.logging import Log
from lo.core.services import LOService
from lo.core.shellexec import CommandExecutionError, LOShellExec
from lo.core.variables import LOVar


class PackageManager:
    """Helper class to manage package lists."""

    def __init__(self, controller):
        self.controller = controller
        self.apt_packages: List[str] = []
        self.packages: List[List[str]] = []

    def add_apt_package(self, package: str) -> None:
        """Add an APT package to the install list."""
        if package not in self.apt_packages:
            self.apt_packages.append(package)

    def add_apt_packages(self, packages: List[str]) -> None:
        """Add multiple APT packages to the install list."""
        for package in packages:
            self.add_apt_package(package)

    def add_download_package(self, package: List[str]) -> None:
        """Add a download package to the install list.

        Args:
            package: [url, destination_path, description]
        """
        if package not in self.packages:
            self.packages.append(package)


class StackComponentInstaller:
    """Decides which components still need installing."""

    def __init__(self, controller, pkg_manager: PackageManager,
                 timeout: Optional[float] = None):
        self.controller = controller
        self.pkg_manager = pkg_manager
        self.timeout = timeout

    def install_base(self) -> None:
        """Tools needed to register package sources, installed at once."""
        missing = LOAptGet.missing(self.controller, LOVar.lo_base)
        if not missing:
            Log.debug(self.controller, "Base packages already installed")
            return
        Log.wait(self.controller, "Installing base packages    ")
        if not (LOAptGet.update(self.controller, timeout=self.timeout) and
                LOAptGet.install(self.controller, missing,
                                 timeout=self.timeout)):
            Log.failed(self.controller, "Installing base packages    ")
            raise exc.InstallError("unable to install {0}"
                                   .format(' '.join(missing)))
        Log.valide(self.controller, "Installing base packages    ")

    def register_php_repository(self, php_version: str) -> None:
        """Register the PPA on Ubuntu, the Sury repository elsewhere."""
        if LOAptGet.is_installed(self.controller, f'php{php_version}-fpm'):
            Log.debug(self.controller, f"PHP {php_version} already installed")
            return
        if LOVar.lo_distro == 'ubuntu':
            if glob.glob('/etc/apt/sources.list.d/ondrej-*'):
                Log.debug(self.controller, "ondrej PPA already registered")
                return
            Log.wait(self.controller, "Adding PHP repository       ")
            if not LOAptGet.add_repository(self.controller, LOVar.lo_php_ppa,
                                           timeout=self.timeout):
                Log.failed(self.controller, "Adding PHP repository       ")
                raise exc.InstallError("unable to add {0}"
                                       .format(LOVar.lo_php_ppa))
            Log.valide(self.controller, "Adding PHP repository       ")
            return

        if os.path.isfile(LOVar.lo_php_sury_list):
            Log.debug(self.controller, "Sury repository already registered")
            return
        keyring = os.path.join(LOVar.lo_tmp_dir, 'debsuryorg-keyring.deb')
        if not LODownload.download(self.controller, [
                [LOVar.lo_php_sury_keyring_url, keyring, "Sury keyring"]]):
            raise exc.InstallError("unable to download the Sury keyring")
        try:
            installed = LOShellExec.cmd_exec(self.controller,
                                             ['dpkg', '-i', keyring],
                                             timeout=self.timeout)
        except CommandExecutionError as e:
            Log.debug(self.controller, str(e))
            installed = False
        finally:
            LOFileUtils.rm(self.controller, keyring)
        if not installed:
            raise exc.InstallError("unable to install the Sury keyring")
        codename = LOVar.lo_platform_codename
        with open(LOVar.lo_php_sury_list, 'w', encoding='utf-8') as source:
            source.write("deb [signed-by=/usr/share/keyrings/"
                         "deb.sury.org-php.gpg] https://packages.sury.org/"
                         "php/ {0} main\n".format(codename))
        Log.info(self.controller, "Registered Sury PHP repository for {0}"
                 .format(codename))

    def install_nginx(self) -> None:
        """Install Nginx if not already installed."""
        if not LOAptGet.is_installed(self.controller, 'nginx'):
            Log.debug(self.controller,
                      "Setting apt_packages variable for Nginx")
            self.pkg_manager.add_apt_packages(LOVar.lo_nginx)
        else:
            Log.debug(self.controller, "Nginx already installed")

    def install_php_version(self, php_version: str) -> None:
        """Install a PHP version and the modules Laravel needs."""
        self.pkg_manager.add_apt_packages(
            LOAptGet.missing(self.controller,
                             LOVar.php_packages(php_version)))

    def install_tools(self) -> None:
        self.pkg_manager.add_apt_packages(
            LOAptGet.missing(self.controller, LOVar.lo_tools))

    def install_mysql(self) -> None:
        """Install MySQL server if not already installed."""
        if not LOAptGet.is_installed(self.controller, 'mysql-server'):
            Log.debug(self.controller,
                      "Setting apt_packages variable for MySQL")
            self.pkg_manager.add_apt_packages(LOVar.lo_mysql)
        else:
            Log.debug(self.controller, "MySQL already installed")

    def install_composer(self) -> None:
        """Install Composer if not already installed."""
        if not LOAptGet.is_exec(self.controller, 'composer'):
            Log.debug(self.controller, "Setting packages variable for Composer")
            self.pkg_manager.add_download_package([
                LOVar.lo_composer_installer_url,
                os.path.join(LOVar.lo_tmp_dir, 'composer-setup.php'),
                "Composer"
            ])
        else:
            Log.debug(self.controller, "Composer already installed")


def setup_composer(self, installer, timeout=None):
    """Run the downloaded Composer installer into /usr/local/bin."""
    install_dir, filename = os.path.split(LOVar.lo_composer_path)
    try:
        installed = LOShellExec.cmd_exec(
            self, ['php', installer, '--install-dir={0}'.format(install_dir),
                   '--filename={0}'.format(filename)],
            cwd=os.path.dirname(installer), timeout=timeout)
    except CommandExecutionError as e:
        Log.debug(self, str(e))
        installed = False
    finally:
        LOFileUtils.rm(self, installer)
    if not installed:
        raise exc.InstallError("Composer installation failed")


def verify_php_socket(self, php_version):
    """Raise StackVerificationFailed unless the PHP-FPM socket exists."""
    socket_path = LOVar.php_socket(php_version)
    try:
        mode = os.stat(socket_path).st_mode
    except OSError:
        mode = 0
    if not stat.S_ISSOCK(mode):
        raise exc.StackVerificationFailed(
            "PHP-FPM socket missing: {0}".format(socket_path))
    Log.debug(self, "found PHP-FPM socket {0}".format(socket_path))


def ensure_stack(self, php_version, with_mysql=False, timeout=None):
    """Install whatever part of the stack is missing, then (re)start the
    services and check PHP-FPM answers on its socket.

    Already installed packages are left alone. Raises InstallError when a
    package or Composer cannot be installed.
    """
    pkg_manager = PackageManager(self)
    installer = StackComponentInstaller(self, pkg_manager, timeout=timeout)

    installer.install_base()
    installer.register_php_repository(php_version)
    installer.install_php_version(php_version)
    installer.install_nginx()
    installer.install_tools()
    if with_mysql:
        installer.install_mysql()
    installer.install_composer()

    if pkg_manager.apt_packages:
        Log.wait(self, "Updating apt-cache          ")
        if not LOAptGet.update(self, timeout=timeout):
            Log.failed(self, "Updating apt-cache          ")
            raise exc.InstallError("apt-get update failed")
        Log.valide(self, "Updating apt-cache          ")
        Log.wait(self, "Installing APT packages     ")
        if not LOAptGet.install(self, pkg_manager.apt_packages,
                                timeout=timeout):
            Log.failed(self, "Installing APT packages     ")
            raise exc.InstallError("unable to install {0}".format(
                ' '.join(pkg_manager.apt_packages)))
        Log.valide(self, "Installing APT packages     ")
    else:
        Log.info(self, "Package stack already installed")

    services = [f'php{php_version}-fpm', 'nginx']
    if with_mysql:
        services.append('mysql')
    for service in services:
        LOService.enable_service(self, service)
        if not LOService.restart_service(self, service):
            raise exc.InstallError("unable to restart {0}".format(service))

    if pkg_manager.packages:
        if not LODownload.download(self, pkg_manager.packages):
            raise exc.InstallError("Composer download failed")
        setup_composer(self, pkg_manager.packages[0][1], timeout=timeout)

    verify_php_socket(self, php_version)


class LOStackController(CementBaseController):
    """Install the server stack on its own."""

    class Meta:
        label = 'stack'
        stacked_on = 'base'
        stacked_type = 'nested'
        description = 'Stack command installs PHP, Nginx, MySQL and Composer'
        arguments = [
            (['--mysql'],
                dict(help='Install MySQL server', action='store_true')),
        ]

        for php_version, php_number in LOVar.lo_php_versions.items():
            arguments.append(([f'--{php_version}'],
                              dict(help=f'Install PHP {php_number} stack',
                                   action='store_true')))

        usage = "lo stack (command) [options]"

    @expose(hide=True)
    def default(self) -> None:
        """Default action of lo stack command."""
        self.app.args.print_help()

    def _php_version(self) -> str:
        """PHP version selected on the command line, else from lo.conf."""
        for php_key, php_number in LOVar.lo_php_versions.items():
            if getattr(self.app.pargs, php_key, False):
                return php_number
        return str(config_value(self.app.config, 'php', 'version',
                                LOVar.lo_php_default))

    @expose(help="Install packages")
    def install(self) -> None:
        """Start installation of packages."""
        php_version = self._php_version()
        if php_version not in LOVar.lo_php_versions.values():
            Log.error(self, "PHP {0} is not supported".format(php_version))
        try:
            ensure_stack(self, php_version,
                         with_mysql=self.app.pargs.mysql,
                         timeout=command_timeout(self.app.config))
        except exc.LOError as e:
            Log.error(self, str(e))
        Log.info(self, "Successfully installed packages")


def load(app: Any) -> None:
    """Load the stack plugin and register controllers."""
    app.handler.register(LOStackController)

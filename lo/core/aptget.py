"""LaraOps package installation using apt-get module."""
import shutil

from lo.core.logging import Log
from lo.core.shellexec import CommandExecutionError, LOShellExec

APT_ENV = {'DEBIAN_FRONTEND': 'noninteractive'}


class LOAptGet():
    """Generic apt-get intialisation"""

    def update(self, timeout=None):
        """
        Similar to `apt-get update`
        """
        Log.debug(self, "Refreshing package indexes")
        return LOShellExec.cmd_exec(self, ['apt-get', 'update', '-y'],
                                    timeout=timeout, extra_env=APT_ENV)

    def install(self, packages, timeout=None):
        """
        Install packages non-interactively, keeping existing config files
        """
        if not packages:
            return True
        command = ['apt-get', 'install', '-y',
                   '-o', 'Dpkg::Options::=--force-confdef',
                   '-o', 'Dpkg::Options::=--force-confold']
        Log.debug(self, "Installing packages: {0}".format(' '.join(packages)))
        return LOShellExec.cmd_exec(self, command + list(packages),
                                    timeout=timeout, extra_env=APT_ENV)

    def add_repository(self, repository, timeout=None):
        """Register a PPA with add-apt-repository"""
        return LOShellExec.cmd_exec(
            self, ['add-apt-repository', '-y', repository],
            timeout=timeout, extra_env=APT_ENV)

    def is_installed(self, package_name):
        """Check whether dpkg reports the package as installed"""
        try:
            status = LOShellExec.cmd_exec_stdout(
                self, ['dpkg-query', '-W', '-f=${Status}', package_name],
                log=False)
        except CommandExecutionError as e:
            Log.debug(self, str(e))
            return False
        return status.strip().endswith('install ok installed')

    def is_exec(self, package_name):
        """Check whether an executable is on PATH"""
        return shutil.which(package_name) is not None

    def missing(self, packages):
        """Subset of packages not yet installed"""
        return [package for package in packages
                if not LOAptGet.is_installed(self, package)]

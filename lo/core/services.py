"""LaraOps Service Manager"""
from lo.core.logging import Log
from lo.core.shellexec import CommandExecutionError, LOShellExec


class LOService():
    """Intialization for service"""

    def _systemctl(self, action, service_name):
        try:
            return LOShellExec.cmd_exec(self, ['systemctl', action,
                                               service_name])
        except CommandExecutionError as e:
            Log.debug(self, str(e))
            return False

    def enable_service(self, service_name):
        """Enable service at boot"""
        Log.debug(self, "Enabling {0}".format(service_name))
        return LOService._systemctl(self, 'enable', service_name)

    def restart_service(self, service_name):
        """
            Restart service
        """
        Log.wait(self, "Restarting {0:10}".format(service_name))
        if LOService._systemctl(self, 'restart', service_name):
            Log.valide(self, "Restarting {0:10}".format(service_name))
            return True
        Log.failed(self, "Restarting {0:10}".format(service_name))
        return False

    def reload_service(self, service_name):
        """
            Reload service
        """
        Log.wait(self, "Reloading {0:10}".format(service_name))
        if LOService._systemctl(self, 'reload', service_name):
            Log.valide(self, "Reloading {0:10}".format(service_name))
            return True
        Log.failed(self, "Reloading {0:10}".format(service_name))
        return False

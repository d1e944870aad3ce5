"""Nginx configuration checks"""
from lo.core.logging import Log
from lo.core.shellexec import CommandExecutionError, LOShellExec


def check_config(self):
    """Run `nginx -t`, True when the configuration is valid"""
    Log.debug(self, "checking NGINX configuration ...")
    try:
        return LOShellExec.cmd_exec(self, ['nginx', '-t'])
    except CommandExecutionError as e:
        Log.debug(self, str(e))
        return False

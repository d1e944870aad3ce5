"""LaraOps certbot wrapper"""
from lo.core.logging import Log
from lo.core.shellexec import CommandExecutionError, LOShellExec


class LOAcme:
    """Request certificates with certbot and its nginx plugin"""

    def setupletsencrypt(self, domains, email, redirect=True, timeout=None):
        """Request and install a certificate for domains, True on success"""
        command = ['certbot', '--nginx', '--non-interactive', '--agree-tos',
                   '-m', email]
        for domain in domains:
            command += ['-d', domain]
        command.append('--redirect' if redirect else '--no-redirect')
        Log.wait(self, "Issuing certificate")
        try:
            issued = LOShellExec.cmd_exec(self, command, timeout=timeout)
        except CommandExecutionError as e:
            Log.debug(self, str(e))
            issued = False
        if issued:
            Log.valide(self, "Issuing certificate")
        else:
            Log.failed(self, "Issuing certificate")
        return issued

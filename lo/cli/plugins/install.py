from cement.core.controller import CementBaseController, expose

from lo.cli.plugins.install_functions import (check_preconditions,
                                              collect_plan, pipeline_steps,
                                              run_pipeline)
from lo.core import exc
from lo.core.config import command_timeout, config_flag, config_value
from lo.core.lock import LOLock
from lo.core.logging import Log
from lo.core.plan import RunContext
from lo.core.variables import LOVar


class LOInstallController(CementBaseController):
    class Meta:
        label = 'install'
        stacked_on = 'base'
        stacked_type = 'nested'
        description = ('this command installs the server stack and a '
                       'Laravel application, answering prompts for every '
                       'option')
        arguments = [
            (['--skip-ssl'],
                dict(help="do not request a TLS certificate",
                     action='store_true')),
            (['--no-validate'],
                dict(help="only check required answers are not empty",
                     action='store_true')),
        ]
        usage = "lo install [options]"

    def _defaults(self):
        config = self.app.config
        return {
            'php_version': str(config_value(config, 'php', 'version',
                                            LOVar.lo_php_default)),
            'webroot': config_value(config, 'install', 'webroot',
                                    LOVar.lo_webroot),
            'certificate_email': config_value(config, 'letsencrypt',
                                              'email'),
        }

    @expose(hide=True)
    def default(self):
        pargs = self.app.pargs
        config = self.app.config
        validate = (config_flag(config, 'install', 'validate-inputs', True) and
                    not pargs.no_validate)
        secure_admin_panel = config_flag(config, 'install',
                                         'secure-admin-panel')
        lock_file = config_value(config, 'install', 'lock-file',
                                 LOVar.lo_lock_file)

        try:
            check_preconditions(self, config_value(
                config, 'install', 'connectivity-url',
                LOVar.lo_connectivity_url))
            with LOLock(self, lock_file):
                plan = collect_plan(self, self._defaults(), validate=validate,
                                    secure_admin_panel=secure_admin_panel)
                ctx = RunContext(plan=plan,
                                 timeout=command_timeout(config),
                                 public_ip_url=config_value(
                                     config, 'install', 'public-ip-url',
                                     LOVar.lo_public_ip_url))
                error = run_pipeline(self, ctx,
                                     pipeline_steps(skip_ssl=pargs.skip_ssl))
        except exc.LOError as e:
            Log.error(self, str(e))

        self.summary(ctx, error)
        if error is not None:
            Log.error(self, "Installation aborted at step '{0}'"
                      .format(ctx.step))

    def summary(self, ctx, error):
        """Final report, the site URL or the step that aborted"""
        plan = ctx.plan
        if error is not None:
            Log.info(self, Log.FAIL + "Aborted at step: {0}".format(ctx.step))
            Log.info(self, Log.FAIL + "Error: {0}".format(error))
            if ctx.rollback_failures:
                Log.warn(self, "{0} rollback action(s) failed, see {1}"
                         .format(ctx.rollback_failures, LOVar.lo_log_file))
            return

        https = ctx.cert_status is not None and ctx.cert_status.is_issued
        url = plan.app_url(https=https)
        Log.info(self, "Laravel installation completed.")
        Log.info(self, Log.OKGREEN + "URL: {0}".format(url))
        if not https and ctx.cert_status is not None:
            Log.warn(self, "Served over plain HTTP: {0}"
                     .format(ctx.cert_status.reason))
        if plan.admin_panel is not None:
            Log.info(self, Log.OKGREEN + "phpMyAdmin URL: {0}/{1}/".format(
                url, plan.admin_panel.alias))
            if plan.admin_panel.basic_auth:
                Log.info(self, Log.WARNING +
                         "phpMyAdmin basic-auth username: {0}"
                         .format(plan.admin_panel.auth_user))
        for advisory in ctx.advisories:
            Log.warn(self, "SECURITY: {0}".format(advisory))


def load(app):
    # register the plugin class.. this only happens if the plugin is enabled
    app.handler.register(LOInstallController)

"""LaraOps main application entry point."""
import copy
import sys

from cement.core.exc import CaughtSignal, FrameworkError
from cement.core.foundation import CementApp
from cement.ext.ext_argparse import ArgParseArgumentHandler
from cement.utils.misc import init_defaults

from lo.core import exc
from lo.core.variables import LOVar

# this has to happen after you import sys, but before you import anything
# from Cement "source: https://github.com/datafolklabs/cement/issues/290"
if '--debug' in sys.argv:
    sys.argv.remove('--debug')
    TOGGLE_DEBUG = True
else:
    TOGGLE_DEBUG = False

# Application default.  Should update config/lo.conf to reflect any
# changes, or additions here.
defaults = init_defaults('lo', 'log.logging', 'php', 'install',
                         'letsencrypt')

defaults['log.logging']['file'] = LOVar.lo_log_file
defaults['log.logging']['level'] = 'DEBUG'
defaults['log.logging']['to_console'] = False

defaults['php']['version'] = LOVar.lo_php_default

defaults['install']['webroot'] = LOVar.lo_webroot
defaults['install']['validate-inputs'] = True
defaults['install']['secure-admin-panel'] = False
defaults['install']['command-timeout'] = 1800
defaults['install']['connectivity-url'] = LOVar.lo_connectivity_url
defaults['install']['public-ip-url'] = LOVar.lo_public_ip_url
defaults['install']['lock-file'] = LOVar.lo_lock_file

defaults['letsencrypt']['email'] = ''

test_defaults = copy.deepcopy(defaults)
test_defaults['log.logging']['file'] = ''


class LOArgHandler(ArgParseArgumentHandler):
    class Meta:
        label = 'lo_args_handler'

    def error(self, message):
        super(LOArgHandler, self).error("unknown args: {0}".format(message))


class LOApp(CementApp):
    class Meta:
        label = 'lo'

        config_defaults = defaults

        # All built-in application bootstrapping (always run)
        bootstrap = 'lo.cli.bootstrap'

        arg_handler = LOArgHandler

        debug = TOGGLE_DEBUG

        exit_on_close = True


class LOTestApp(LOApp):
    """A test app that is better suited for testing."""
    class Meta:
        # default argv to empty (don't use sys.argv)
        argv = []

        # don't look for config files (could break tests)
        config_files = []

        config_defaults = test_defaults

        # don't call sys.exit() when app.close() is called in tests
        exit_on_close = False


def main():
    with LOApp() as app:
        try:
            app.run()
        except exc.LOError as e:
            print(e)
            app.exit_code = 1
        except FrameworkError as e:
            # Catch framework errors and exit 1 (error)
            print('FrameworkError > %s' % e)
            app.exit_code = 1
        except CaughtSignal as e:
            # SIGINT or SIGTERM, the install did not complete
            print('\n%s' % e)
            app.exit_code = 1


if __name__ == '__main__':
    main()

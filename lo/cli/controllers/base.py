"""LaraOps base controller."""

from cement.core.controller import CementBaseController, expose

from lo.core.variables import LOVar

VERSION = LOVar.lo_version

BANNER = """
LaraOps v%s
Copyright (c) 2026 LaraOps.
""" % VERSION


class LOBaseController(CementBaseController):
    class Meta:
        label = 'base'
        description = ("LaraOps provisions a single server for a Laravel "
                       "application: PHP, Nginx, MySQL, TLS and phpMyAdmin")
        arguments = [
            (['-v', '--version'], dict(action='version', version=BANNER)),
        ]

    @expose(hide=True)
    def default(self):
        self.app.args.print_help()

"""LaraOps bootstrapping."""

# All built-in application controllers should be imported, and registered
# in this file in the same way as LOBaseController.

from lo.cli.controllers.base import LOBaseController
from lo.cli.plugins import install, stack


def load(app):
    app.handler.register(LOBaseController)
    stack.load(app)
    install.load(app)

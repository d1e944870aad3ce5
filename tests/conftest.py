from unittest.mock import Mock

import pytest


class Dummy:
    """Stands in for a cement controller, Log only needs app.log"""
    class App:
        class Log:
            def __init__(self):
                self.messages = []

            def debug(self, msg):
                self.messages.append(('debug', msg))

            def error(self, msg):
                self.messages.append(('error', msg))

            def info(self, msg):
                self.messages.append(('info', msg))

            def warning(self, msg):
                self.messages.append(('warning', msg))

        def __init__(self):
            self.log = self.Log()
            self.config = Mock()

    def __init__(self):
        self.app = self.App()

    def logged(self, level):
        return [msg for lvl, msg in self.app.log.messages if lvl == level]


@pytest.fixture
def controller():
    return Dummy()

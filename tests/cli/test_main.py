import signal
from unittest.mock import patch

import pytest
from cement.core.exc import CaughtSignal

from lo.cli import main as lo_main
from lo.cli.main import LOTestApp
from lo.core import exc


def run_main(error):
    """Run main() with an app whose run() raises error, return the app"""
    apps = []

    class RaisingApp(LOTestApp):
        def setup(self):
            super(RaisingApp, self).setup()
            apps.append(self)

        def run(self):
            raise error

    with patch.object(lo_main, 'LOApp', RaisingApp):
        lo_main.main()
    return apps[0]


def test_interrupted_prompt_exits_non_zero(capsys):
    app = run_main(CaughtSignal(signal.SIGINT, None))
    assert app.exit_code == 1


def test_lo_error_exits_non_zero(capsys):
    app = run_main(exc.InstallerLocked("another lo install is running"))
    assert app.exit_code == 1
    assert 'another lo install is running' in capsys.readouterr().out


@pytest.mark.parametrize('argv', [['-v'], ['--version']])
def test_version(argv, capsys):
    with pytest.raises(SystemExit):
        with LOTestApp(argv=argv) as app:
            app.run()
    assert 'LaraOps v' in capsys.readouterr().out

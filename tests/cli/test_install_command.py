from unittest.mock import MagicMock, patch

import pytest

from lo.cli.main import LOTestApp
from lo.core import exc
from lo.core.plan import AdminPanelOptions, CertStatus, InstallationPlan


@pytest.fixture
def plan():
    return InstallationPlan(
        project_name='app', domain='example.test',
        admin_panel=AdminPanelOptions(alias='pma', auth_user='pmaadmin',
                                      auth_password='password1'))


@pytest.fixture
def wired():
    with patch('lo.cli.plugins.install.check_preconditions') as checks, \
            patch('lo.cli.plugins.install.LOLock', MagicMock()) as lock, \
            patch('lo.cli.plugins.install.collect_plan') as collect, \
            patch('lo.cli.plugins.install.run_pipeline') as pipeline:
        yield checks, lock, collect, pipeline


def test_precondition_failure_exits_before_prompting(wired, capsys):
    checks, lock, collect, pipeline = wired
    checks.side_effect = exc.InsufficientPrivilege("must be run as root")

    with pytest.raises(SystemExit) as e:
        with LOTestApp(argv=['install']) as app:
            app.run()

    assert e.value.code == 1
    collect.assert_not_called()
    pipeline.assert_not_called()
    assert 'must be run as root' in capsys.readouterr().out


def test_successful_install_prints_summary(wired, plan, capsys):
    checks, lock, collect, pipeline = wired
    collect.return_value = plan

    def finish(controller, ctx, steps):
        ctx.cert_status = CertStatus.skipped("DNS mismatch")
        return None
    pipeline.side_effect = finish

    with LOTestApp(argv=['install', '--skip-ssl', '--no-validate']) as app:
        app.run()

    assert collect.call_args[1]['validate'] is False
    assert collect.call_args[1]['secure_admin_panel'] is False
    steps = dict(pipeline.call_args[0][2])
    assert steps['certificate'].__name__ == '_skip_certificate_step'
    out = capsys.readouterr().out
    assert 'URL: http://example.test' in out
    assert 'phpMyAdmin URL: http://example.test/pma/' in out
    assert 'pmaadmin' in out
    assert 'password1' not in out


def test_failed_install_reports_step(wired, plan, capsys):
    checks, lock, collect, pipeline = wired
    collect.return_value = plan

    def fail(controller, ctx, steps):
        ctx.step = 'migrations'
        return exc.MigrationError("php artisan migrate failed")
    pipeline.side_effect = fail

    with pytest.raises(SystemExit) as e:
        with LOTestApp(argv=['install']) as app:
            app.run()

    assert e.value.code == 1
    out = capsys.readouterr().out
    assert 'Aborted at step: migrations' in out
    assert 'php artisan migrate failed' in out


def test_advisories_are_shown(wired, capsys):
    checks, lock, collect, pipeline = wired
    collect.return_value = InstallationPlan(
        project_name='app', domain='example.test',
        admin_panel=AdminPanelOptions())

    def finish(controller, ctx, steps):
        ctx.advisories.append('phpMyAdmin at /pma/ is published without '
                              'basic auth or IP allow-list')
        return None
    pipeline.side_effect = finish

    with LOTestApp(argv=['install']) as app:
        app.run()

    assert 'SECURITY: phpMyAdmin at /pma/' in capsys.readouterr().out

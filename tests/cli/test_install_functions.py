"""
Tests for the install steps in install_functions.py
"""
import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, call, patch

import pytest

from lo.cli.plugins import install_functions
from lo.cli.plugins.install import LOInstallController
from lo.cli.plugins.install_functions import (
    branch_exists, configure_environment, install_admin_panel, materialize,
    migrate, pipeline_steps, provision_certificate, publish_site,
    render_vhost, run_pipeline, seed, validate_and_reload)
from lo.core import exc
from lo.core.fileutils import LOFileUtils
from lo.core.plan import (CLONE, AdminPanelOptions, CertState,
                          InstallationPlan, RunContext)
from lo.core.rollback import RollbackLedger
from lo.core.template import LOTemplate
from lo.core.variables import LOVar


def make_plan(webroot, **kw):
    kw.setdefault('project_name', 'app')
    kw.setdefault('domain', 'example.test')
    return InstallationPlan(webroot=str(webroot), **kw)


@pytest.fixture
def nginx_dirs(tmp_path):
    """Point the nginx directories at tmp_path"""
    available = tmp_path / 'sites-available'
    enabled = tmp_path / 'sites-enabled'
    snippets = tmp_path / 'snippets'
    with patch.object(LOVar, 'lo_nginx_available', str(available)), \
            patch.object(LOVar, 'lo_nginx_enabled', str(enabled)), \
            patch.object(LOVar, 'lo_nginx_snippets', str(snippets)):
        yield available, enabled, snippets


def fake_composer(controller, command, cwd=None, **kwargs):
    """run_command stand in, composer populates the project"""
    if command[0] == 'composer':
        with open(os.path.join(cwd, 'artisan'), 'w') as artisan:
            artisan.write('#!/usr/bin/env php\n')
        with open(os.path.join(cwd, '.env.example'), 'w') as example:
            example.write('APP_NAME=Laravel\nAPP_URL=http://localhost\n')
        return True
    return False


# Project materialisation

def test_materialize_refuses_non_empty_directory(tmp_path, controller):
    project = tmp_path / 'app'
    project.mkdir()
    (project / 'index.php').write_text('<?php')
    ledger = RollbackLedger()

    with patch('lo.cli.plugins.install_functions.run_command') as run:
        with pytest.raises(exc.DirectoryNotEmpty):
            materialize(controller, make_plan(tmp_path), ledger)

    run.assert_not_called()
    assert len(ledger) == 0
    assert os.listdir(str(project)) == ['index.php']
    assert (project / 'index.php').read_text() == '<?php'


def test_materialize_refuses_file_in_the_way(tmp_path, controller):
    (tmp_path / 'app').write_text('not a directory')
    with pytest.raises(exc.DirectoryNotEmpty):
        materialize(controller, make_plan(tmp_path), RollbackLedger())


def test_scaffold_creates_project_and_env(tmp_path, controller):
    ledger = RollbackLedger()
    with patch('lo.cli.plugins.install_functions.run_command',
               side_effect=fake_composer) as run:
        project_dir = materialize(controller, make_plan(tmp_path), ledger)

    assert project_dir == str(tmp_path / 'app')
    command = run.call_args[0][1]
    assert command[:4] == ['composer', 'create-project', 'laravel/laravel',
                           '.']
    assert run.call_args[1]['extra_env']['COMPOSER_ALLOW_SUPERUSER'] == '1'
    assert (tmp_path / 'app' / '.env').read_text().startswith('APP_NAME')
    assert ledger.descriptions == [
        'remove directory {0}'.format(tmp_path / 'app')]


def test_scaffold_into_empty_directory_only_empties_it(tmp_path, controller):
    (tmp_path / 'app').mkdir()
    ledger = RollbackLedger()
    with patch('lo.cli.plugins.install_functions.run_command',
               side_effect=fake_composer):
        materialize(controller, make_plan(tmp_path), ledger)
    assert ledger.descriptions == [
        'empty directory {0}'.format(tmp_path / 'app')]


def test_scaffold_failure(tmp_path, controller):
    with patch('lo.cli.plugins.install_functions.run_command',
               return_value=False):
        with pytest.raises(exc.ScaffoldFailed):
            materialize(controller, make_plan(tmp_path), RollbackLedger())


def test_existing_env_is_kept(tmp_path, controller):
    def composer_with_env(controller, command, cwd=None, **kwargs):
        fake_composer(controller, command, cwd=cwd)
        with open(os.path.join(cwd, '.env'), 'w') as env:
            env.write('APP_KEY=base64:kept\n')
        return True

    with patch('lo.cli.plugins.install_functions.run_command',
               side_effect=composer_with_env):
        materialize(controller, make_plan(tmp_path), RollbackLedger())
    assert (tmp_path / 'app' / '.env').read_text() == 'APP_KEY=base64:kept\n'


class TestClone(unittest.TestCase):
    """git clone with branch fallback"""

    def setUp(self):
        self.mock_self = Mock()
        self.shell_patcher = patch(
            'lo.cli.plugins.install_functions.LOShellExec')
        self.mock_shell = self.shell_patcher.start()
        self.mock_shell.cmd_exec.return_value = True
        self.webroot = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.webroot)
        self.plan = make_plan(self.webroot, install_method=CLONE,
                              repo_url='https://git.example.test/app.git',
                              branch='release')

    def tearDown(self):
        patch.stopall()

    def commands(self):
        return [c[0][1] for c in self.mock_shell.cmd_exec.call_args_list]

    def test_missing_branch_falls_back_to_default(self):
        self.mock_shell.cmd_exec_stdout.return_value = (
            'a1b2c3\trefs/heads/main\n')

        materialize(self.mock_self, self.plan, RollbackLedger())

        clone, install = self.commands()
        self.assertEqual(clone, ['git', 'clone',
                                 'https://git.example.test/app.git', '.'])
        self.assertEqual(install, ['composer', 'install', '--no-interaction',
                                   '--prefer-dist'])
        warnings = [c[0][0] for c in
                    self.mock_self.app.log.warning.call_args_list]
        self.assertTrue(any('release' in msg for msg in warnings))

    def test_existing_branch_is_cloned(self):
        self.mock_shell.cmd_exec_stdout.return_value = (
            'a1b2c3\trefs/heads/main\nd4e5f6\trefs/heads/release\n')

        materialize(self.mock_self, self.plan, RollbackLedger())

        self.assertEqual(self.commands()[0],
                         ['git', 'clone', '--branch', 'release',
                          'https://git.example.test/app.git', '.'])

    def test_clone_failure(self):
        self.mock_shell.cmd_exec_stdout.return_value = ''
        self.mock_shell.cmd_exec.return_value = False
        with self.assertRaises(exc.CloneFailed):
            materialize(self.mock_self, self.plan, RollbackLedger())

    def test_dependency_failure(self):
        self.mock_shell.cmd_exec_stdout.return_value = ''
        self.mock_shell.cmd_exec.side_effect = [True, False]
        with self.assertRaises(exc.DependencyResolutionFailed):
            materialize(self.mock_self, self.plan, RollbackLedger())


def test_branch_exists_matches_whole_ref(controller):
    with patch('lo.cli.plugins.install_functions.LOShellExec') as shell:
        shell.cmd_exec_stdout.return_value = (
            'a1b2c3\trefs/heads/feature/release\n')
        assert not branch_exists(controller, 'repo', 'release')
        shell.cmd_exec_stdout.return_value = 'a1b2c3\trefs/heads/release\n'
        assert branch_exists(controller, 'repo', 'release')


# Environment

def test_configure_environment_writes_keys(tmp_path, controller):
    plan = make_plan(tmp_path, use_database=True, db_name='laravel_db',
                     db_user='laravel_user', db_password='s3cret pass')
    os.makedirs(plan.project_dir)
    with open(plan.env_file, 'w') as env:
        env.write('APP_NAME=Laravel\nAPP_URL=http://localhost\n')

    with patch('lo.cli.plugins.install_functions.artisan',
               return_value=True) as artisan:
        configure_environment(controller, plan)

    with open(plan.env_file) as env:
        content = env.read()
    assert content.startswith('APP_NAME=Laravel\nAPP_URL=http://example.test\n')
    assert 'DB_CONNECTION=mysql\n' in content
    assert 'DB_DATABASE=laravel_db\n' in content
    assert "DB_PASSWORD='s3cret pass'\n" in content
    assert artisan.call_args_list[0] == call(
        controller, plan.project_dir, 'key:generate', '--force', timeout=None)


def test_configure_environment_without_database(tmp_path, controller):
    plan = make_plan(tmp_path)
    os.makedirs(plan.project_dir)
    with patch('lo.cli.plugins.install_functions.artisan', return_value=True):
        configure_environment(controller, plan)
    with open(plan.env_file) as env:
        assert 'DB_' not in env.read()


def test_key_generation_is_fatal(tmp_path, controller):
    plan = make_plan(tmp_path)
    os.makedirs(plan.project_dir)
    with patch('lo.cli.plugins.install_functions.artisan',
               return_value=False):
        with pytest.raises(exc.KeyGenerationFailed):
            configure_environment(controller, plan)


def test_config_cache_failure_only_warns(tmp_path, controller):
    plan = make_plan(tmp_path)
    os.makedirs(plan.project_dir)
    with patch('lo.cli.plugins.install_functions.artisan',
               side_effect=[True, False, False]):
        configure_environment(controller, plan)
    assert len(controller.logged('warning')) == 2


def test_migration_failure_is_fatal_seed_is_not(controller):
    with patch('lo.cli.plugins.install_functions.artisan',
               return_value=False):
        with pytest.raises(exc.MigrationError):
            migrate(controller, '/var/www/app')
        assert seed(controller, '/var/www/app') is False


# Nginx site

def test_render_vhost(tmp_path):
    site = make_plan(tmp_path).site
    vhost = render_vhost(site)
    assert 'server_name example.test;' in vhost
    assert 'root {0};'.format(tmp_path / 'app' / 'public') in vhost
    assert 'fastcgi_pass unix:/var/run/php/php8.3-fpm.sock;' in vhost
    assert 'try_files $uri $uri/ /index.php?$query_string;' in vhost
    assert 'include /etc/nginx/snippets/app-admin.conf;' in vhost


def test_publish_site(tmp_path, controller, nginx_dirs):
    available, enabled, snippets = nginx_dirs
    plan = make_plan(tmp_path)
    ledger = RollbackLedger()
    with patch('lo.cli.plugins.install_functions.check_config',
               return_value=True), \
            patch('lo.cli.plugins.install_functions.LOService') as service:
        service.reload_service.return_value = True
        publish_site(controller, plan, ledger)

    assert os.path.islink(str(enabled / 'app.conf'))
    assert os.readlink(str(enabled / 'app.conf')) == str(available /
                                                         'app.conf')
    assert (snippets / 'app-admin.conf').read_text() == ''
    assert 'include {0};'.format(snippets / 'app-admin.conf') in \
        (available / 'app.conf').read_text()
    service.reload_service.assert_called_once_with(controller, 'nginx')
    assert ledger.descriptions[0] == 'reload nginx'


def test_publish_refuses_existing_site(tmp_path, controller, nginx_dirs):
    available = nginx_dirs[0]
    available.mkdir()
    (available / 'app.conf').write_text('# someone else')
    ledger = RollbackLedger()

    with pytest.raises(exc.SiteAlreadyExists):
        publish_site(controller, make_plan(tmp_path), ledger)

    assert (available / 'app.conf').read_text() == '# someone else'
    assert len(ledger) == 0


def test_invalid_config_never_goes_live(tmp_path, controller, nginx_dirs):
    available, enabled, snippets = nginx_dirs
    ledger = RollbackLedger()
    with patch('lo.cli.plugins.install_functions.check_config',
               return_value=False), \
            patch('lo.cli.plugins.install_functions.LOService') as service:
        with pytest.raises(exc.ConfigValidationFailed):
            publish_site(controller, make_plan(tmp_path), ledger)
    service.reload_service.assert_not_called()
    assert not os.path.lexists(str(enabled / 'app.conf'))

    with patch('lo.core.rollback.LOService.reload_service',
               return_value=True):
        assert ledger.rollback(controller) == 0
    assert os.listdir(str(available)) == []
    assert os.listdir(str(snippets)) == []


def test_reload_failure(controller):
    with patch('lo.cli.plugins.install_functions.check_config',
               return_value=True), \
            patch('lo.cli.plugins.install_functions.LOService') as service:
        service.reload_service.return_value = False
        with pytest.raises(exc.ReloadFailed):
            validate_and_reload(controller)


# Certificate

class TestProvisionCertificate(unittest.TestCase):

    def setUp(self):
        self.mock_self = Mock()
        self.network = patch(
            'lo.cli.plugins.install_functions.LONetwork').start()
        self.acme = patch('lo.cli.plugins.install_functions.LOAcme').start()
        self.apt = patch('lo.cli.plugins.install_functions.LOAptGet').start()
        self.apt.missing.return_value = []

    def tearDown(self):
        patch.stopall()

    def provision(self):
        return provision_certificate(self.mock_self, 'example.test',
                                     'admin@example.test')

    def test_dns_mismatch_is_skipped_without_certbot(self):
        self.network.resolve_a.return_value = ['203.0.113.10']
        self.network.public_ip.return_value = '198.51.100.1'

        status = self.provision()

        self.assertEqual(status.state, CertState.SKIPPED)
        self.assertIn('203.0.113.10', status.reason)
        self.acme.setupletsencrypt.assert_not_called()
        self.apt.install.assert_not_called()

    def test_unresolved_domain_is_skipped(self):
        self.network.resolve_a.return_value = []

        self.assertEqual(self.provision().state, CertState.SKIPPED)
        self.network.public_ip.assert_not_called()
        self.acme.setupletsencrypt.assert_not_called()

    def test_unknown_public_ip_is_skipped(self):
        self.network.resolve_a.return_value = ['203.0.113.10']
        self.network.public_ip.return_value = None
        self.assertEqual(self.provision().state, CertState.SKIPPED)
        self.acme.setupletsencrypt.assert_not_called()

    def test_issued(self):
        self.network.resolve_a.return_value = ['203.0.113.10']
        self.network.public_ip.return_value = '203.0.113.10'
        self.apt.missing.return_value = ['certbot']
        self.apt.install.return_value = True
        self.acme.setupletsencrypt.return_value = True

        self.assertTrue(self.provision().is_issued)
        self.acme.setupletsencrypt.assert_called_once_with(
            self.mock_self, ['example.test'], 'admin@example.test',
            timeout=None)

    def test_any_matching_record_is_enough(self):
        self.network.resolve_a.return_value = ['198.51.100.1',
                                               '203.0.113.10']
        self.network.public_ip.return_value = '203.0.113.10'
        self.acme.setupletsencrypt.return_value = True

        self.assertTrue(self.provision().is_issued)

    def test_certbot_failure(self):
        self.network.resolve_a.return_value = ['203.0.113.10']
        self.network.public_ip.return_value = '203.0.113.10'
        self.acme.setupletsencrypt.return_value = False
        self.assertEqual(self.provision().state, CertState.ISSUE_FAILED)

    def test_never_raises(self):
        self.network.resolve_a.side_effect = RuntimeError('resolver crashed')
        status = self.provision()
        self.assertEqual(status.state, CertState.ISSUE_FAILED)
        self.assertEqual(status.reason, 'resolver crashed')


# phpMyAdmin

@pytest.fixture
def pma(tmp_path, nginx_dirs):
    """An already installed phpMyAdmin under tmp_path"""
    pma_dir = tmp_path / 'phpmyadmin'
    pma_dir.mkdir()
    (pma_dir / 'index.php').write_text('<?php')
    nginx_dirs[2].mkdir()
    with patch.object(LOVar, 'lo_pma_dir', str(pma_dir)), \
            patch.object(LOVar, 'lo_pma_htpasswd',
                         str(tmp_path / '.pma_pass')), \
            patch('lo.cli.plugins.install_functions.LOAptGet') as apt, \
            patch('lo.cli.plugins.install_functions.LOFileUtils.chown'), \
            patch('lo.cli.plugins.install_functions.check_config',
                  return_value=True), \
            patch('lo.cli.plugins.install_functions.LOService') as service:
        apt.missing.return_value = []
        service.reload_service.return_value = True
        yield pma_dir


def test_panel_without_access_control_is_flagged(tmp_path, controller, pma):
    plan = make_plan(tmp_path, admin_panel=AdminPanelOptions(alias='dbadmin'))
    ledger = RollbackLedger()

    advisories = install_admin_panel(controller, plan, ledger)

    assert len(advisories) == 1
    assert '/dbadmin/' in advisories[0]
    assert advisories[0] in controller.logged('warning')
    snippet = open(plan.admin_snippet).read()
    assert 'location ^~ /dbadmin/ {' in snippet
    assert 'alias {0}/;'.format(pma) in snippet
    assert 'auth_basic' not in snippet
    assert 'deny all;' not in snippet
    config = (pma / 'config.inc.php').read_text()
    secret = config.split("$cfg['blowfish_secret'] = '")[1].split("'")[0]
    assert len(secret) == 32
    assert (pma / 'tmp').is_dir()


def test_panel_with_basic_auth_and_allow_list(tmp_path, controller, pma):
    options = AdminPanelOptions(alias='pma', auth_user='pmaadmin',
                                auth_password='password1',
                                allowed_ips=('203.0.113.7', '198.51.100.2'))
    plan = make_plan(tmp_path, admin_panel=options)
    with patch('lo.cli.plugins.install_functions.run_command',
               return_value=True) as run:
        advisories = install_admin_panel(controller, plan, RollbackLedger())

    assert advisories == []
    htpasswd = str(tmp_path / '.pma_pass')
    run.assert_called_once_with(
        controller, ['htpasswd', '-B', '-i', '-c', htpasswd, 'pmaadmin'],
        cwd=None, timeout=None, extra_env=None, input_data='password1\n')
    snippet = open(plan.admin_snippet).read()
    assert 'auth_basic_user_file {0};'.format(htpasswd) in snippet
    assert snippet.index('allow 203.0.113.7;') < \
        snippet.index('allow 198.51.100.2;') < snippet.index('deny all;')


def test_panel_rollback_restores_previous_snippet(tmp_path, controller, pma):
    plan = make_plan(tmp_path, admin_panel=AdminPanelOptions(
        allowed_ips=('203.0.113.7',)))
    with open(plan.admin_snippet, 'w') as previous:
        previous.write('# previous snippet\n')
    ledger = RollbackLedger()

    install_admin_panel(controller, plan, ledger)
    assert 'deny all;' in open(plan.admin_snippet).read()

    with patch('lo.core.rollback.LOService.reload_service',
               return_value=True):
        assert ledger.rollback(controller) == 0
    assert open(plan.admin_snippet).read() == '# previous snippet\n'


def test_htpasswd_failure(tmp_path, controller, pma):
    plan = make_plan(tmp_path, admin_panel=AdminPanelOptions(
        auth_user='pmaadmin', auth_password='password1'))
    with patch('lo.cli.plugins.install_functions.run_command',
               return_value=False):
        with pytest.raises(exc.AdminPanelError):
            install_admin_panel(controller, plan, RollbackLedger())


def test_no_panel_requested(tmp_path, controller):
    assert install_admin_panel(controller, make_plan(tmp_path),
                               RollbackLedger()) == []


def test_pma_snippet_template():
    snippet = LOTemplate.render('phpmyadmin.mustache', {
        'project_name': 'app', 'alias': 'pma', 'pma_dir': '/usr/share/pma',
        'basic_auth': False, 'htpasswd': '/etc/nginx/.pma_pass',
        'allowed_ips': [], 'restrict_ips': False,
        'php_socket': '/var/run/php/php8.2-fpm.sock'})
    assert 'location = /pma {' in snippet
    assert 'fastcgi_pass unix:/var/run/php/php8.2-fpm.sock;' in snippet
    assert 'allow' not in snippet


# Pipeline

def test_failure_in_environment_rolls_back(tmp_path, controller):
    plan = make_plan(tmp_path)
    snippet = tmp_path / 'app-admin.conf'
    snippet.write_text('previous')
    ctx = RunContext(plan=plan)
    ctx.ledger.backed_up(str(snippet),
                         LOFileUtils.backup(controller, str(snippet)))
    snippet.write_text('rewritten')
    steps = [name_step for name_step in pipeline_steps()
             if name_step[0] in ['project', 'environment']]

    with patch('lo.cli.plugins.install_functions.run_command',
               side_effect=fake_composer):
        error = run_pipeline(controller, ctx, steps)

    assert isinstance(error, exc.KeyGenerationFailed)
    assert ctx.step == 'environment'
    assert ctx.rollback_failures == 0
    assert not (tmp_path / 'app').exists()
    assert snippet.read_text() == 'previous'


def test_unexpected_exception_rolls_back(tmp_path, controller):
    ctx = RunContext(plan=make_plan(tmp_path))
    undone = []
    ctx.ledger.record('undo', lambda c: undone.append(True))

    def broken(controller, ctx):
        raise ValueError('unexpected')

    error = run_pipeline(controller, ctx, [('broken', broken)])

    assert isinstance(error, ValueError)
    assert undone == [True]
    assert ctx.step == 'broken'


def test_interrupt_rolls_back(tmp_path, controller):
    ctx = RunContext(plan=make_plan(tmp_path))
    undone = []
    ctx.ledger.record('undo', lambda c: undone.append(True))

    def interrupted(controller, ctx):
        raise KeyboardInterrupt

    error = run_pipeline(controller, ctx, [('stack', interrupted)])
    assert isinstance(error, exc.LOError)
    assert undone == [True]


def test_successful_pipeline(tmp_path, controller):
    ctx = RunContext(plan=make_plan(tmp_path))
    ran = []
    steps = [('one', lambda c, x: ran.append(1)),
             ('two', lambda c, x: ran.append(2))]
    assert run_pipeline(controller, ctx, steps) is None
    assert ran == [1, 2]
    assert ctx.ledger.descriptions == []


def test_skip_ssl_step(tmp_path, controller):
    ctx = RunContext(plan=make_plan(tmp_path))
    steps = dict(pipeline_steps(skip_ssl=True))
    steps['certificate'](controller, ctx)
    assert ctx.cert_status.state == CertState.SKIPPED


def test_issued_certificate_upgrades_app_url(tmp_path, controller):
    plan = make_plan(tmp_path)
    os.makedirs(plan.project_dir)
    with open(plan.env_file, 'w') as env:
        env.write('APP_URL=http://example.test\n')
    ctx = RunContext(plan=plan)
    with patch('lo.cli.plugins.install_functions.provision_certificate') as \
            provision, \
            patch('lo.cli.plugins.install_functions.artisan',
                  return_value=True):
        provision.return_value = install_functions.CertStatus.issued()
        dict(pipeline_steps())['certificate'](controller, ctx)
    assert ctx.cert_status.is_issued
    with open(plan.env_file) as env:
        assert env.read() == 'APP_URL=https://example.test\n'



# End to end

def fake_tools(controller, command, cwd=None, **kwargs):
    """run_command stand in, every tool succeeds"""
    if command[0] == 'composer':
        return fake_composer(controller, command, cwd=cwd)
    return True


@pytest.fixture
def boundaries(nginx_dirs):
    """Patch what reaches outside the test: packages, processes, nginx,
    DNS and certbot"""
    with patch('lo.cli.plugins.install_functions.ensure_stack') as stack, \
            patch('lo.cli.plugins.install_functions.run_command',
                  side_effect=fake_tools) as run, \
            patch('lo.cli.plugins.install_functions.check_config',
                  return_value=True), \
            patch('lo.cli.plugins.install_functions.LOService') as service, \
            patch('lo.cli.plugins.install_functions.LONetwork') as network, \
            patch('lo.cli.plugins.install_functions.LOAcme') as acme, \
            patch('lo.cli.plugins.install_functions.LOFileUtils.chown'):
        service.reload_service.return_value = True
        network.resolve_a.return_value = ['203.0.113.10']
        network.public_ip.return_value = '198.51.100.1'
        yield Mock(stack=stack, run=run, service=service, network=network,
                   acme=acme, nginx_dirs=nginx_dirs)


def test_fresh_scaffold_without_database_stays_on_http(tmp_path, controller,
                                                       boundaries, capsys):
    plan = make_plan(tmp_path / 'www', use_database=False,
                     run_migrations=False, run_seeders=False,
                     certificate_email='admin@example.test')
    ctx = RunContext(plan=plan)

    error = run_pipeline(controller, ctx, pipeline_steps())

    assert error is None
    assert ctx.step == 'permissions'
    assert ctx.cert_status.state == CertState.SKIPPED
    assert '203.0.113.10' in ctx.cert_status.reason
    boundaries.acme.setupletsencrypt.assert_not_called()
    boundaries.stack.assert_called_once_with(controller, '8.3',
                                             with_mysql=False, timeout=None)
    with open(plan.env_file) as env:
        content = env.read()
    assert 'APP_URL=http://example.test\n' in content
    assert 'APP_ENV=production\n' in content
    assert 'DB_' not in content
    commands = [c[0][1] for c in boundaries.run.call_args_list]
    assert ['php', 'artisan', 'migrate', '--force'] not in commands
    assert os.path.islink(plan.site_link)
    assert ctx.advisories == []

    LOInstallController.summary(controller, ctx, error)
    out = capsys.readouterr().out
    assert 'URL: http://example.test' in out
    assert 'Served over plain HTTP' in out
    assert 'phpMyAdmin' not in out


def test_open_admin_panel_is_reported(tmp_path, controller, boundaries, pma,
                                      capsys):
    plan = make_plan(tmp_path / 'www', admin_panel=AdminPanelOptions(),
                     run_migrations=False)
    ctx = RunContext(plan=plan)

    error = run_pipeline(controller, ctx, pipeline_steps())

    assert error is None
    assert len(ctx.advisories) == 1
    advisory = ctx.advisories[0]
    assert '/pma/' in advisory
    assert advisory in controller.logged('warning')
    with open(plan.admin_snippet) as snippet:
        content = snippet.read()
    assert 'location ^~ /pma/ {' in content
    assert 'auth_basic' not in content

    LOInstallController.summary(controller, ctx, error)
    out = capsys.readouterr().out
    assert 'phpMyAdmin URL: http://example.test/pma/' in out
    assert 'SECURITY: ' + advisory in out
    assert 'basic-auth username' not in out


def test_failure_after_publish_removes_site(tmp_path, controller,
                                            boundaries):
    plan = make_plan(tmp_path / 'www', admin_panel=AdminPanelOptions(
        auth_user='pmaadmin', auth_password='password1'))
    ctx = RunContext(plan=plan)
    available, enabled, snippets = boundaries.nginx_dirs

    with patch('lo.cli.plugins.install_functions.LOAptGet') as apt, \
            patch('lo.core.rollback.LOService.reload_service',
                  return_value=True) as reload:
        apt.missing.return_value = ['apache2-utils']
        apt.install.return_value = False
        error = run_pipeline(controller, ctx, pipeline_steps(skip_ssl=True))

    assert isinstance(error, exc.AdminPanelError)
    assert ctx.step == 'phpMyAdmin'
    assert ctx.rollback_failures == 0
    assert not os.path.lexists(plan.site_link)
    assert os.listdir(str(available)) == []
    assert not os.path.exists(plan.project_dir)
    reload.assert_called_once_with(controller, 'nginx')

import getpass
import glob
import os
import traceback

from lo.cli.plugins.stack import ensure_stack
from lo.core import exc
from lo.core.acme import LOAcme
from lo.core.aptget import LOAptGet
from lo.core.domainvalidate import (MIN_PASSWORD_LENGTH, LODomain, is_alias,
                                    is_db_identifier, is_email, is_ipv4,
                                    is_project_name)
from lo.core.download import LODownload
from lo.core.envfile import upsert_key
from lo.core.extract import LOExtract
from lo.core.fileutils import LOFileUtils
from lo.core.logging import Log
from lo.core.mysql import LOMysql, StatementExcecutionError
from lo.core.network import LONetwork
from lo.core.nginx import check_config
from lo.core.plan import (CLONE, SCAFFOLD, AdminPanelOptions, CertStatus,
                          InstallationPlan)
from lo.core.random import RANDOM
from lo.core.services import LOService
from lo.core.shellexec import CommandExecutionError, LOShellExec
from lo.core.template import LOTemplate
from lo.core.variables import LOVar

# Install Functions Constants
INSTALL_CONSTANTS = {
    'DEFAULT_PROJECT_NAME': 'laravel-app',
    'DEFAULT_DOMAIN': 'example.com',
    'DEFAULT_DB_NAME': 'laravel_db',
    'DEFAULT_DB_USER': 'laravel_user',
    'DEFAULT_BRANCH': 'main',
    'DEFAULT_PMA_ALIAS': 'pma',
    'DEFAULT_PMA_USER': 'pmaadmin',
    'NO_AUTH': 'none',
    'CONNECTIVITY_TIMEOUT': 5,
}

COMPOSER_ENV = {'COMPOSER_ALLOW_SUPERUSER': '1', 'COMPOSER_NO_INTERACTION': '1'}
GIT_ENV = {'GIT_TERMINAL_PROMPT': '0'}

YES = ['y', 'yes']


# Shared utility functions
def execute_command_safely(controller, command, error, cwd=None,
                           timeout=None, extra_env=None, input_data=None):
    """Run command, raise error (an LOError instance) when it fails"""
    if not run_command(controller, command, cwd=cwd, timeout=timeout,
                       extra_env=extra_env, input_data=input_data):
        raise error


def run_command(controller, command, cwd=None, timeout=None, extra_env=None,
                input_data=None):
    """Run command, False when it fails, times out or cannot start"""
    try:
        return LOShellExec.cmd_exec(controller, command, cwd=cwd,
                                    timeout=timeout, extra_env=extra_env,
                                    input_data=input_data)
    except CommandExecutionError as e:
        Log.debug(controller, str(e))
        return False


def artisan(controller, project_dir, *args, timeout=None):
    """Run `php artisan` in the project directory, True on success"""
    return run_command(controller, ['php', 'artisan'] + list(args),
                       cwd=project_dir, timeout=timeout)


# Precondition checks
def check_preconditions(self, connectivity_url=LOVar.lo_connectivity_url):
    """Fail before any change when the host cannot run an install"""
    if os.geteuid() != 0:
        raise exc.InsufficientPrivilege("lo install must be run as root")
    if LOVar.lo_distro_name:
        Log.info(self, "Detected OS: {0} {1}".format(
            LOVar.lo_distro_name, LOVar.lo_platform_version))
    if LOVar.lo_distro not in ['ubuntu', 'debian']:
        Log.warn(self, "Untested distribution {0}, continuing"
                 .format(LOVar.lo_distro or 'unknown'))
    if not LONetwork.is_online(self, connectivity_url,
                               timeout=INSTALL_CONSTANTS[
                                   'CONNECTIVITY_TIMEOUT']):
        raise exc.NoConnectivity("no internet connectivity ({0})"
                                 .format(connectivity_url))


# Parameter collection
def _ask(prompt, text, default=''):
    answer = prompt("{0} [{1}]: ".format(text, default)).strip()
    return answer or default


def _ask_secret(secret, text, default):
    answer = secret("{0} [{1}]: ".format(
        text, 'generated' if default else '')).strip()
    return answer or default


def _require(field, value):
    if not value:
        raise exc.ValidationError(field, "must not be empty")
    return value


def _check(validate, field, ok, reason):
    if validate and not ok:
        raise exc.ValidationError(field, reason)


def _check_password(validate, field, password):
    _check(validate, field, len(password) >= MIN_PASSWORD_LENGTH,
           "must be at least {0} characters".format(MIN_PASSWORD_LENGTH))


def _select_php(self, prompt, default):
    versions = list(LOVar.lo_php_versions.values())
    Log.info(self, "Available PHP versions:", log=False)
    for index, version in enumerate(versions, start=1):
        Log.info(self, "{0}) PHP {1}".format(index, version), log=False)
    default_index = (versions.index(default) + 1
                     if default in versions else 1)
    answer = _ask(prompt, "Select PHP version", str(default_index))
    if answer.isdigit() and 1 <= int(answer) <= len(versions):
        return versions[int(answer) - 1]
    if answer in versions:
        return answer
    raise exc.ValidationError('php_version', "unsupported PHP version {0}"
                              .format(answer))


def collect_plan(self, defaults, prompt=input, secret=getpass.getpass,
                 validate=True, secure_admin_panel=False):
    """Ask the operator for every install parameter.

    Each answer is checked as soon as it is given and the first bad one
    raises ValidationError, so nothing after it is asked. With validate
    False only the non-empty checks on required fields remain.
    """
    php_version = _select_php(
        self, prompt, defaults.get('php_version', LOVar.lo_php_default))

    method = _ask(prompt, "1) New Laravel  2) Git repo", "1")
    if method not in ['1', '2']:
        raise exc.ValidationError('install_method', "choose 1 or 2")

    project_name = _require('project_name', _ask(
        prompt, "Project folder name",
        INSTALL_CONSTANTS['DEFAULT_PROJECT_NAME']))
    _check(validate, 'project_name', is_project_name(project_name),
           "only letters, digits, '.', '_' and '-' are allowed")
    # a path separator would escape the web root even without validation
    if '/' in project_name or project_name in ['.', '..']:
        raise exc.ValidationError('project_name', "must be a folder name")

    domain = _require('domain', LODomain.validate(self, _ask(
        prompt, "Domain name", INSTALL_CONSTANTS['DEFAULT_DOMAIN'])))
    _check(validate, 'domain', LODomain.is_valid(domain),
           "invalid domain name {0}".format(domain))

    use_database = _ask(prompt, "Use MySQL database? (y/n)",
                        "y").lower() in YES
    db_name = db_user = db_password = ''
    if use_database:
        db_name = _require('db_name', _ask(
            prompt, "DB name", INSTALL_CONSTANTS['DEFAULT_DB_NAME']))
        _check(validate, 'db_name', is_db_identifier(db_name),
               "only letters, digits and '_' are allowed")
        db_user = _require('db_user', _ask(
            prompt, "DB user", INSTALL_CONSTANTS['DEFAULT_DB_USER']))
        _check(validate, 'db_user', is_db_identifier(db_user),
               "only letters, digits and '_' are allowed")
        db_password = _require('db_password', _ask_secret(
            secret, "DB password", RANDOM.long(self)))
        _check_password(validate, 'db_password', db_password)

    run_migrations = _ask(prompt, "Run migrations and seeders? (y/n)",
                          "y" if use_database else "n").lower() in YES

    repo_url = ''
    branch = INSTALL_CONSTANTS['DEFAULT_BRANCH']
    if method == '2':
        repo_url = _require('repo_url', _ask(prompt, "Git repository URL"))
        branch = _require('branch', _ask(prompt, "Git branch", branch))

    certificate_email = _require('certificate_email', _ask(
        prompt, "Email for the TLS certificate",
        defaults.get('certificate_email') or 'admin@{0}'.format(domain)))
    _check(validate, 'certificate_email', is_email(certificate_email),
           "invalid email address {0}".format(certificate_email))

    admin_panel = None
    if _ask(prompt, "Install phpMyAdmin? (y/n)", "y").lower() in YES:
        admin_panel = _collect_admin_panel(self, prompt, secret, validate)
        if secure_admin_panel and not admin_panel.has_access_control:
            raise exc.ValidationError(
                'admin_panel', "basic auth or an IP allow-list is required")

    return InstallationPlan(
        project_name=project_name,
        domain=domain,
        php_version=php_version,
        webroot=defaults.get('webroot', LOVar.lo_webroot),
        install_method=CLONE if method == '2' else SCAFFOLD,
        repo_url=repo_url,
        branch=branch,
        use_database=use_database,
        db_name=db_name,
        db_user=db_user,
        db_password=db_password,
        run_migrations=run_migrations,
        run_seeders=run_migrations,
        certificate_email=certificate_email,
        admin_panel=admin_panel,
    )


def _collect_admin_panel(self, prompt, secret, validate):
    alias = _require('pma_alias', _ask(
        prompt, "phpMyAdmin alias (no slashes)",
        INSTALL_CONSTANTS['DEFAULT_PMA_ALIAS']).strip('/'))
    _check(validate, 'pma_alias', is_alias(alias),
           "only letters, digits, '_' and '-' are allowed")

    auth_user = _ask(prompt, "Basic-auth username for phpMyAdmin "
                     "('{0}' to disable)".format(INSTALL_CONSTANTS['NO_AUTH']),
                     INSTALL_CONSTANTS['DEFAULT_PMA_USER'])
    auth_password = ''
    if auth_user.lower() == INSTALL_CONSTANTS['NO_AUTH']:
        auth_user = ''
    else:
        _check(validate, 'pma_user', ':' not in auth_user,
               "must not contain ':'")
        generated = RANDOM.long(self)
        auth_password = _ask_secret(
            secret, "Basic-auth password for phpMyAdmin", generated)
        _check_password(validate, 'pma_password', auth_password)
        if auth_password == generated:
            Log.info(self, "Generated phpMyAdmin password: {0}"
                     .format(generated), log=False)

    allowed = _ask(prompt, "Restrict phpMyAdmin to these IPs "
                   "(comma separated, empty for all)")
    allowed_ips = tuple(ip.strip() for ip in allowed.split(',') if ip.strip())
    for ip in allowed_ips:
        _check(validate, 'pma_allow_ip', is_ipv4(ip),
               "invalid IP address {0}".format(ip))

    return AdminPanelOptions(alias=alias, auth_user=auth_user,
                             auth_password=auth_password,
                             allowed_ips=allowed_ips)


# Database
def setup_database(self, plan, timeout=None):
    """Create the database and its user, idempotent"""
    if not plan.use_database:
        Log.debug(self, "No database requested")
        return
    Log.wait(self, "Setting up database         ")
    try:
        LOMysql.create_database(self, plan.db_name, plan.db_user,
                                plan.db_password,
                                grant_host=LOVar.lo_mysql_grant_host,
                                timeout=timeout)
    except StatementExcecutionError as e:
        Log.failed(self, "Setting up database         ")
        raise exc.DatabaseError(str(e))
    Log.valide(self, "Setting up database         ")


# Project materialisation
def branch_exists(controller, repo_url, branch, timeout=None):
    """True when the remote has a head named branch"""
    try:
        heads = LOShellExec.cmd_exec_stdout(
            controller, ['git', 'ls-remote', '--heads', repo_url, branch],
            timeout=timeout, extra_env=GIT_ENV)
    except CommandExecutionError as e:
        Log.debug(controller, str(e))
        return False
    ref = 'refs/heads/{0}'.format(branch)
    return any(line.split()[-1] == ref
               for line in heads.splitlines() if line.strip())


def _scaffold(controller, plan, timeout):
    Log.wait(controller, "Creating Laravel project    ")
    if not run_command(controller,
                       ['composer', 'create-project',
                        LOVar.lo_laravel_package, '.', '--no-interaction',
                        '--prefer-dist'],
                       cwd=plan.project_dir, timeout=timeout,
                       extra_env=COMPOSER_ENV):
        Log.failed(controller, "Creating Laravel project    ")
        raise exc.ScaffoldFailed("composer create-project failed")
    Log.valide(controller, "Creating Laravel project    ")


def _clone(controller, plan, timeout):
    command = ['git', 'clone']
    if branch_exists(controller, plan.repo_url, plan.branch, timeout=timeout):
        command += ['--branch', plan.branch]
    else:
        Log.warn(controller, "Branch {0} not found, cloning the default "
                 "branch".format(plan.branch))
    Log.wait(controller, "Cloning repository          ")
    if not run_command(controller, command + [plan.repo_url, '.'],
                       cwd=plan.project_dir, timeout=timeout,
                       extra_env=GIT_ENV):
        Log.failed(controller, "Cloning repository          ")
        raise exc.CloneFailed("git clone of {0} failed".format(plan.repo_url))
    Log.valide(controller, "Cloning repository          ")

    Log.wait(controller, "Installing dependencies     ")
    if not run_command(controller,
                       ['composer', 'install', '--no-interaction',
                        '--prefer-dist'],
                       cwd=plan.project_dir, timeout=timeout,
                       extra_env=COMPOSER_ENV):
        Log.failed(controller, "Installing dependencies     ")
        raise exc.DependencyResolutionFailed("composer install failed")
    Log.valide(controller, "Installing dependencies     ")


def materialize(self, plan, ledger, timeout=None):
    """Scaffold or clone the project into an absent or empty directory"""
    project_dir = plan.project_dir
    if (LOFileUtils.has_entries(self, project_dir) or
            (os.path.exists(project_dir) and not os.path.isdir(project_dir))):
        raise exc.DirectoryNotEmpty(
            "project directory exists and is not empty: {0}"
            .format(project_dir))

    if os.path.isdir(project_dir):
        ledger.populated_directory(project_dir)
    else:
        LOFileUtils.mkdir(self, project_dir)
        ledger.created_directory(project_dir)

    if plan.install_method == CLONE:
        _clone(self, plan, timeout)
    else:
        _scaffold(self, plan, timeout)

    env_example = os.path.join(project_dir, '.env.example')
    if not os.path.exists(plan.env_file) and os.path.isfile(env_example):
        LOFileUtils.copyfile(self, env_example, plan.env_file)
    return project_dir


# Environment
def environment_settings(plan, https=False):
    """Ordered .env keys managed by the installer"""
    settings = [
        ('APP_URL', plan.app_url(https=https)),
        ('APP_ENV', 'production'),
        ('APP_DEBUG', 'false'),
    ]
    if plan.use_database:
        settings += [
            ('DB_CONNECTION', 'mysql'),
            ('DB_HOST', LOVar.lo_mysql_host),
            ('DB_PORT', LOVar.lo_mysql_port),
            ('DB_DATABASE', plan.db_name),
            ('DB_USERNAME', plan.db_user),
            ('DB_PASSWORD', plan.db_password),
        ]
    return settings


def configure_environment(self, plan, timeout=None):
    """Write the managed .env keys then bootstrap the application"""
    Log.wait(self, "Configuring environment     ")
    try:
        for key, value in environment_settings(plan):
            upsert_key(plan.env_file, key, value)
    except OSError as e:
        Log.failed(self, "Configuring environment     ")
        raise exc.ConfigError("unable to write {0}: {1}"
                              .format(plan.env_file, e))
    Log.valide(self, "Configuring environment     ")

    if not artisan(self, plan.project_dir, 'key:generate', '--force',
                   timeout=timeout):
        raise exc.KeyGenerationFailed("php artisan key:generate failed")
    if not artisan(self, plan.project_dir, 'config:cache', timeout=timeout):
        Log.warn(self, "php artisan config:cache failed")
    if not artisan(self, plan.project_dir, 'storage:link', timeout=timeout):
        Log.warn(self, "php artisan storage:link failed")


def migrate(self, project_dir, timeout=None):
    Log.wait(self, "Running migrations          ")
    if not artisan(self, project_dir, 'migrate', '--force', timeout=timeout):
        Log.failed(self, "Running migrations          ")
        raise exc.MigrationError("php artisan migrate failed")
    Log.valide(self, "Running migrations          ")


def seed(self, project_dir, timeout=None):
    """Best effort, False when seeding failed"""
    if artisan(self, project_dir, 'db:seed', '--force', timeout=timeout):
        return True
    Log.warn(self, "Seeder failed, continuing")
    return False


# Nginx site
def render_vhost(site):
    """Text of the nginx server block for a SiteConfiguration"""
    return LOTemplate.render('laravel-vhost.mustache', {
        'project_name': site.project_name,
        'release': LOVar.lo_version,
        'domain': site.domain,
        'public_dir': site.public_dir,
        'php_socket': site.php_socket,
        'admin_snippet': site.admin_snippet,
    })


def validate_and_reload(self, link=None):
    """nginx -t then reload. A failed test removes link so the broken
    configuration never goes live."""
    if not check_config(self):
        if link:
            LOFileUtils.remove_symlink(self, link)
        raise exc.ConfigValidationFailed("nginx configuration test failed")
    if not LOService.reload_service(self, 'nginx'):
        raise exc.ReloadFailed("nginx reload failed")


def publish_site(self, plan, ledger):
    """Write, enable and load the project's server block"""
    site = plan.site
    if os.path.exists(site.path) or os.path.lexists(site.link):
        raise exc.SiteAlreadyExists("nginx configuration already exists: {0}"
                                    .format(site.path))

    # replayed last on rollback, once the files below are gone
    ledger.reload_service('nginx')

    LOFileUtils.mkdir(self, os.path.dirname(site.path))
    Log.debug(self, "writting the {0} file".format(site.path))
    with open(site.path, 'x', encoding='utf-8') as vhost:
        vhost.write(render_vhost(site))
    ledger.created_file(site.path)

    if LOFileUtils.touch(self, site.admin_snippet):
        ledger.created_file(site.admin_snippet)

    LOFileUtils.mkdir(self, os.path.dirname(site.link))
    LOFileUtils.create_symlink(self, [site.path, site.link])
    ledger.created_file(site.link)

    validate_and_reload(self, link=site.link)
    Log.info(self, "Site {0} enabled".format(site.domain))


# Certificate
def provision_certificate(self, domain, email, public_ip_url=None,
                          timeout=None):
    """Request a certificate when DNS points here. Never raises."""
    try:
        addresses = LONetwork.resolve_a(self, domain)
        if not addresses:
            return CertStatus.skipped("{0} does not resolve".format(domain))
        server_ip = LONetwork.public_ip(self, public_ip_url or
                                        LOVar.lo_public_ip_url)
        if not server_ip:
            return CertStatus.skipped("public IP of this server is unknown")
        if server_ip not in addresses:
            return CertStatus.skipped(
                "{0} points to {1}, this server is {2}".format(
                    domain, ', '.join(addresses), server_ip))

        missing = LOAptGet.missing(self, LOVar.lo_certbot)
        if missing and not LOAptGet.install(self, missing, timeout=timeout):
            return CertStatus.issue_failed("unable to install certbot")
        if LOAcme.setupletsencrypt(self, [domain], email, timeout=timeout):
            return CertStatus.issued()
        return CertStatus.issue_failed("certbot failed, see {0}"
                                       .format(LOVar.lo_log_file))
    except Exception as e:
        Log.debug(self, traceback.format_exc())
        return CertStatus.issue_failed(str(e))


# phpMyAdmin
def _install_pma_files(controller, ledger):
    archive = os.path.join(LOVar.lo_tmp_dir, 'pma.tar.gz')
    extract_dir = os.path.join(LOVar.lo_tmp_dir, 'pma')
    if not LODownload.download(controller,
                               [[LOVar.lo_pma_url, archive, "phpMyAdmin"]]):
        raise exc.AdminPanelError("phpMyAdmin download failed")
    LOFileUtils.rm(controller, extract_dir)
    LOFileUtils.mkdir(controller, extract_dir)
    if not LOExtract.extract(controller, archive, extract_dir):
        raise exc.AdminPanelError("phpMyAdmin archive is corrupt")
    sources = glob.glob(os.path.join(extract_dir, 'phpMyAdmin-*'))
    if not sources:
        raise exc.AdminPanelError("unexpected phpMyAdmin archive layout")
    LOFileUtils.rm(controller, LOVar.lo_pma_dir)
    LOFileUtils.mvfile(controller, sources[0], LOVar.lo_pma_dir)
    ledger.created_directory(LOVar.lo_pma_dir)
    LOFileUtils.rm(controller, extract_dir)


def _replace_later(controller, ledger, path):
    """Back path up before it is rewritten, or forget it on rollback"""
    if os.path.exists(path):
        ledger.backed_up(path, LOFileUtils.backup(controller, path))
        return False
    ledger.created_file(path)
    return True


def install_admin_panel(self, plan, ledger, timeout=None):
    """Install phpMyAdmin behind the project's domain.

    Returns the security advisories raised, empty when the panel has
    basic auth or an IP allow-list.
    """
    options = plan.admin_panel
    if options is None:
        return []

    missing = LOAptGet.missing(self, LOVar.lo_pma_tools)
    if missing and not LOAptGet.install(self, missing, timeout=timeout):
        raise exc.AdminPanelError("unable to install {0}"
                                  .format(' '.join(missing)))

    if os.path.isfile(os.path.join(LOVar.lo_pma_dir, 'index.php')):
        Log.info(self, "phpMyAdmin already installed")
    else:
        _install_pma_files(self, ledger)

    pma_tmp = os.path.join(LOVar.lo_pma_dir, 'tmp')
    LOFileUtils.mkdir(self, pma_tmp)
    LOFileUtils.chown(self, pma_tmp, LOVar.lo_php_user, LOVar.lo_php_user)
    LOFileUtils.chmod(self, pma_tmp, 0o770)

    pma_config = os.path.join(LOVar.lo_pma_dir, 'config.inc.php')
    if not os.path.exists(pma_config):
        LOTemplate.deploy(self, pma_config, 'pma-config.mustache', {
            'blowfish': RANDOM.blowfish(self),
            'pma_dir': LOVar.lo_pma_dir,
        })
        ledger.created_file(pma_config)

    ledger.reload_service('nginx')

    if options.basic_auth:
        htpasswd = LOVar.lo_pma_htpasswd
        command = ['htpasswd', '-B', '-i']
        if _replace_later(self, ledger, htpasswd):
            command.append('-c')
        execute_command_safely(
            self, command + [htpasswd, options.auth_user],
            exc.AdminPanelError("htpasswd failed for {0}"
                                .format(options.auth_user)),
            input_data=options.auth_password + '\n', timeout=timeout)

    _replace_later(self, ledger, plan.admin_snippet)
    LOTemplate.deploy(self, plan.admin_snippet, 'phpmyadmin.mustache', {
        'project_name': plan.project_name,
        'alias': options.alias,
        'pma_dir': LOVar.lo_pma_dir,
        'basic_auth': options.basic_auth,
        'htpasswd': LOVar.lo_pma_htpasswd,
        'allowed_ips': list(options.allowed_ips),
        'restrict_ips': bool(options.allowed_ips),
        'php_socket': plan.php_socket,
    })

    validate_and_reload(self)
    Log.info(self, "phpMyAdmin available at /{0}/".format(options.alias))

    if options.has_access_control:
        return []
    advisory = ("phpMyAdmin at /{0}/ is published without basic auth or "
                "IP allow-list".format(options.alias))
    Log.warn(self, advisory)
    return [advisory]


# Hand-off
def finalize_permissions(self, plan, timeout=None):
    """Give the project to the web server user, degraded on failure"""
    try:
        LOFileUtils.chown(self, plan.project_dir, LOVar.lo_php_user,
                          LOVar.lo_php_user, recursive=True)
    except (KeyError, OSError) as e:
        Log.warn(self, "Unable to change owner of {0}: {1}"
                 .format(plan.project_dir, e))
        return
    for writable in ['storage', os.path.join('bootstrap', 'cache')]:
        path = os.path.join(plan.project_dir, writable)
        if os.path.isdir(path) and not run_command(
                self, ['chmod', '-R', 'ug+rwX', path], timeout=timeout):
            Log.warn(self, "Unable to make {0} writable".format(path))


# Pipeline
def _stack_step(controller, ctx):
    ensure_stack(controller, ctx.plan.php_version,
                 with_mysql=ctx.plan.use_database, timeout=ctx.timeout)


def _database_step(controller, ctx):
    setup_database(controller, ctx.plan, timeout=ctx.timeout)


def _materialize_step(controller, ctx):
    materialize(controller, ctx.plan, ctx.ledger, timeout=ctx.timeout)


def _environment_step(controller, ctx):
    configure_environment(controller, ctx.plan, timeout=ctx.timeout)


def _migrate_step(controller, ctx):
    if not ctx.plan.run_migrations:
        Log.debug(controller, "Migrations not requested")
        return
    migrate(controller, ctx.plan.project_dir, timeout=ctx.timeout)
    if ctx.plan.run_seeders:
        seed(controller, ctx.plan.project_dir, timeout=ctx.timeout)


def _publish_step(controller, ctx):
    publish_site(controller, ctx.plan, ctx.ledger)


def _certificate_step(controller, ctx):
    plan = ctx.plan
    status = provision_certificate(controller, plan.domain,
                                   plan.certificate_email,
                                   public_ip_url=ctx.public_ip_url,
                                   timeout=ctx.timeout)
    ctx.cert_status = status
    if not status.is_issued:
        Log.warn(controller, "No TLS certificate: {0}".format(status.reason))
        return
    upsert_key(plan.env_file, 'APP_URL', plan.app_url(https=True))
    if not artisan(controller, plan.project_dir, 'config:cache',
                   timeout=ctx.timeout):
        Log.warn(controller, "php artisan config:cache failed")


def _skip_certificate_step(controller, ctx):
    ctx.cert_status = CertStatus.skipped("--skip-ssl given")


def _admin_panel_step(controller, ctx):
    ctx.advisories += install_admin_panel(controller, ctx.plan, ctx.ledger,
                                          timeout=ctx.timeout)


def _permissions_step(controller, ctx):
    finalize_permissions(controller, ctx.plan, timeout=ctx.timeout)


def pipeline_steps(skip_ssl=False):
    """Ordered (name, step) pairs, each step is called as step(controller,
    ctx)"""
    return [
        ('package stack', _stack_step),
        ('database', _database_step),
        ('project', _materialize_step),
        ('environment', _environment_step),
        ('migrations', _migrate_step),
        ('nginx site', _publish_step),
        ('certificate',
         _skip_certificate_step if skip_ssl else _certificate_step),
        ('phpMyAdmin', _admin_panel_step),
        ('permissions', _permissions_step),
    ]


def run_pipeline(self, ctx, steps):
    """Run steps in order, stop at the first failure and roll back.

    Returns None on success, else the exception that aborted ctx.step.
    """
    for name, step in steps:
        ctx.step = name
        Log.debug(self, "step: {0}".format(name))
        try:
            step(self, ctx)
        except exc.LOError as e:
            error = e
        except KeyboardInterrupt:
            error = exc.LOError("interrupted by operator")
        except Exception as e:
            Log.debug(self, traceback.format_exc())
            error = e
        else:
            continue
        Log.error(self, "{0} failed: {1}".format(name, error), False)
        ctx.rollback_failures = ctx.ledger.rollback(self)
        return error
    return None

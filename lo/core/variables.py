"""LaraOps core variable module"""
import os


def _os_release():
    """Parse /etc/os-release into a dict, empty when unavailable"""
    release = {}
    try:
        with open('/etc/os-release', encoding='utf-8') as os_release:
            for line in os_release:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                key, value = line.split('=', 1)
                release[key] = value.strip('"\'')
    except OSError:
        pass
    return release


class LOVar():
    """Intialization of core variables"""

    # LaraOps version
    lo_version = "1.0.0"

    # Platform
    _release = _os_release()
    lo_distro = _release.get('ID', '').lower()
    lo_distro_name = _release.get('NAME', '')
    lo_platform_version = _release.get('VERSION_ID', '')
    lo_platform_codename = _release.get('VERSION_CODENAME', '')

    # PHP versions offered by the installer, newest first
    lo_php_versions = {
        'php83': '8.3',
        'php82': '8.2',
        'php81': '8.1',
        'php80': '8.0',
    }
    lo_php_default = '8.3'
    lo_php_modules = ['fpm', 'cli', 'mbstring', 'xml', 'curl', 'zip', 'gd',
                      'intl', 'bcmath', 'mysql']
    lo_php_user = 'www-data'
    lo_php_ppa = 'ppa:ondrej/php'
    lo_php_sury_list = '/etc/apt/sources.list.d/php.list'
    lo_php_sury_keyring_url = (
        'https://packages.sury.org/debsuryorg-archive-keyring.deb')

    # Packages
    lo_base = ['software-properties-common', 'ca-certificates',
               'lsb-release', 'apt-transport-https', 'curl', 'gnupg',
               'dirmngr']
    lo_nginx = ['nginx']
    lo_tools = ['git', 'unzip', 'wget', 'gnupg2']
    lo_mysql = ['mysql-server']
    lo_certbot = ['certbot', 'python3-certbot-nginx']
    lo_pma_tools = ['wget', 'unzip', 'apache2-utils']

    # Paths
    lo_webroot = '/var/www/'
    lo_nginx_available = '/etc/nginx/sites-available'
    lo_nginx_enabled = '/etc/nginx/sites-enabled'
    lo_nginx_snippets = '/etc/nginx/snippets'
    lo_tmp_dir = '/var/lib/lo/tmp'
    lo_lock_file = '/var/lock/laraops.lock'
    lo_log_dir = '/var/log/lo/'
    lo_log_file = os.path.join(lo_log_dir, 'laraops.log')

    # Composer and Laravel
    lo_composer_path = '/usr/local/bin/composer'
    lo_composer_installer_url = 'https://getcomposer.org/installer'
    lo_laravel_package = 'laravel/laravel'

    # MySQL
    lo_mysql_host = '127.0.0.1'
    lo_mysql_port = '3306'
    lo_mysql_grant_host = 'localhost'

    # phpMyAdmin
    lo_pma_url = ('https://www.phpmyadmin.net/downloads/'
                  'phpMyAdmin-latest-all-languages.tar.gz')
    lo_pma_dir = '/usr/share/phpmyadmin'
    lo_pma_htpasswd = '/etc/nginx/.pma_pass'

    # Network checks
    lo_connectivity_url = 'http://connectivitycheck.gstatic.com/generate_204'
    lo_public_ip_url = 'https://api.ipify.org'

    @staticmethod
    def php_socket(php_version):
        """PHP-FPM unix socket for a PHP version"""
        return f'/var/run/php/php{php_version}-fpm.sock'

    @staticmethod
    def php_packages(php_version):
        """apt package names for a PHP version"""
        return [f'php{php_version}-{module}' for module in LOVar.lo_php_modules]

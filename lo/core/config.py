"""Typed reads of the cement configuration"""


def config_flag(config, section, key, default=False):
    """Boolean setting, values read from lo.conf arrive as strings"""
    if not config.has_section(section) or key not in config.keys(section):
        return default
    value = config.get(section, key)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ['true', 'yes', 'on', '1']


def config_value(config, section, key, default=''):
    if not config.has_section(section) or key not in config.keys(section):
        return default
    value = config.get(section, key)
    return default if value is None else value


def command_timeout(config):
    """Per command timeout in seconds, None when disabled with 0"""
    value = config_value(config, 'install', 'command-timeout', 0)
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        return None
    return timeout if timeout > 0 else None

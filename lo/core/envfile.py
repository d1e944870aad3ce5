"""Laravel .env file editing"""
import re

# values made only of these characters are written unquoted
SAFE_VALUE_RE = re.compile(r'^[A-Za-z0-9_./:@+,=-]*$')


def format_value(value):
    """Quote a value for phpdotenv when it holds unsafe characters"""
    value = str(value)
    if SAFE_VALUE_RE.match(value):
        return value
    if "\n" in value or "\r" in value:
        # one physical line, phpdotenv expands these escapes in double quotes
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        escaped = escaped.replace("$", "\\$")
        escaped = escaped.replace("\n", "\\n").replace("\r", "\\r")
        return f'"{escaped}"'
    escaped = value.replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"


def upsert_key(path, key, value):
    """Set key=value in an env file.

    The first line starting with ``key=`` is replaced in place and later
    lines for the same key are dropped; when the key is missing a line is
    appended. Every other line is kept byte for byte. The file is created
    when it does not exist.
    """
    new_line = f"{key}={format_value(value)}"
    pattern = re.compile(r'^' + re.escape(key) + r'=')
    try:
        with open(path, encoding='utf-8', newline='') as env_file:
            lines = env_file.read().splitlines(keepends=True)
    except FileNotFoundError:
        lines = []

    result = []
    found = False
    for line in lines:
        if pattern.match(line):
            if found:
                continue
            found = True
            ending = line[len(line.rstrip('\r\n')):]
            result.append(new_line + ending)
        else:
            result.append(line)

    if not found:
        if result and not result[-1].endswith('\n'):
            result[-1] += '\n'
        result.append(new_line + '\n')

    with open(path, 'w', encoding='utf-8', newline='') as env_file:
        env_file.write(''.join(result))

"""LaraOps MySQL core classes."""
from lo.core.logging import Log
from lo.core.shellexec import CommandExecutionError, LOShellExec


class StatementExcecutionError(Exception):
    pass


def quote_literal(value):
    """Single-quoted SQL string literal"""
    return "'" + str(value).replace('\\', '\\\\').replace("'", "\\'") + "'"


def quote_identifier(value):
    """Backtick-quoted SQL identifier"""
    return '`' + str(value).replace('`', '``') + '`'


class LOMysql():
    """Run statements through the mysql client as the local root user"""

    def execute(self, statements, errormsg='', log=True, timeout=None):
        """Feed statements to `mysql` on stdin.
        Raises StatementExcecutionError when the client fails."""
        if isinstance(statements, str):
            statements = [statements]
        sql = '\n'.join(statement.rstrip(';') + ';' for statement in statements)
        if log:
            Log.debug(self, "Executing MySQL statements: {0}"
                      .format(LOShellExec._redact(sql)))
        try:
            ok = LOShellExec.cmd_exec(self, ['mysql', '--batch'],
                                      input_data=sql + '\n', log=False,
                                      timeout=timeout)
        except CommandExecutionError as e:
            Log.debug(self, str(e))
            ok = False
        if not ok:
            if errormsg:
                Log.debug(self, errormsg)
            raise StatementExcecutionError(errormsg or 'mysql statement failed')

    def create_database(self, db_name, db_user, db_password,
                        grant_host='localhost', timeout=None):
        """Idempotently create database and user and grant privileges"""
        user = "{0}@{1}".format(quote_literal(db_user),
                                quote_literal(grant_host))
        LOMysql.execute(self, [
            "CREATE DATABASE IF NOT EXISTS {0} CHARACTER SET utf8mb4 "
            "COLLATE utf8mb4_unicode_ci".format(quote_identifier(db_name)),
            "CREATE USER IF NOT EXISTS {0} IDENTIFIED BY {1}"
            .format(user, quote_literal(db_password)),
            "GRANT ALL PRIVILEGES ON {0}.* TO {1}"
            .format(quote_identifier(db_name), user),
            "FLUSH PRIVILEGES",
        ], errormsg='Unable to create database {0}'.format(db_name),
            timeout=timeout)

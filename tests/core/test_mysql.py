from unittest.mock import patch

import pytest

from lo.core.mysql import (LOMysql, StatementExcecutionError,
                           quote_identifier, quote_literal)


def test_quoting():
    assert quote_literal("o'neil") == "'o\\'neil'"
    assert quote_literal('back\\slash') == "'back\\\\slash'"
    assert quote_identifier('weird`name') == '`weird``name`'


def test_create_database_feeds_idempotent_statements(controller):
    with patch('lo.core.mysql.LOShellExec.cmd_exec',
               return_value=True) as cmd_exec:
        LOMysql.create_database(controller, 'laravel_db', 'laravel_user',
                                "pa'ssword")
    args, kwargs = cmd_exec.call_args
    assert args[1] == ['mysql', '--batch']
    sql = kwargs['input_data']
    assert 'CREATE DATABASE IF NOT EXISTS `laravel_db`' in sql
    assert ("CREATE USER IF NOT EXISTS 'laravel_user'@'localhost' "
            "IDENTIFIED BY 'pa\\'ssword'") in sql
    assert "GRANT ALL PRIVILEGES ON `laravel_db`.* TO" in sql
    assert sql.rstrip().endswith('FLUSH PRIVILEGES;')
    assert not any("ssword" in msg for _, msg in controller.app.log.messages)


def test_execute_raises_on_failure(controller):
    with patch('lo.core.mysql.LOShellExec.cmd_exec', return_value=False):
        with pytest.raises(StatementExcecutionError):
            LOMysql.execute(controller, 'SELECT 1', errormsg='boom')

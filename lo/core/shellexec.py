"""LaraOps Shell Functions"""
import os
import re
import subprocess
from typing import Mapping, Optional, Sequence, Union

from lo.core.logging import Log


class CommandExecutionError(Exception):
    """custom Exception for command execution"""
    pass


class LOShellExec:
    """Method to run shell commands"""
    def __init__(self):
        pass

    # secrets reach commands through SQL on stdin or .env content
    _SECRET_PATTERNS = [
        r"(IDENTIFIED BY\s+')((?:[^'\\]|\\.)*)",
        r'(DB_PASSWORD=)(\S+)',
        r'(--password=)(\S+)',
    ]

    @staticmethod
    def _redact(s: str) -> str:
        for pat in LOShellExec._SECRET_PATTERNS:
            s = re.sub(pat, r'\1***', s, flags=re.IGNORECASE)
        return s

    @staticmethod
    def _environ(extra_env: Optional[Mapping[str, str]]):
        if not extra_env:
            return None
        env = dict(os.environ)
        env.update(extra_env)
        return env

    @staticmethod
    def _run(controller, command, input_data=None, timeout=None, cwd=None,
             extra_env=None):
        """subprocess.run with output logged at debug level"""
        proc = subprocess.run(command, input=input_data, text=True,
                              encoding="utf-8", errors="replace",
                              capture_output=True,
                              shell=isinstance(command, str), cwd=cwd,
                              env=LOShellExec._environ(extra_env),
                              timeout=timeout)
        if proc.stderr.strip():
            Log.debug(controller, f"Command Output: {proc.stdout}, \n"
                      f"Command Error: {proc.stderr}")
        else:
            Log.debug(controller, f"Command Output: {proc.stdout}")
        return proc

    @staticmethod
    def _shown(command) -> str:
        if isinstance(command, str):
            return LOShellExec._redact(command)
        return LOShellExec._redact(" ".join(map(str, command)))

    @staticmethod
    def cmd_exec(
        controller,
        command: Union[str, Sequence[str]],
        log: bool = True,
        input_data: Optional[str] = None,
        timeout: Optional[float] = None,
        cwd: Optional[str] = None,
        extra_env: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """Run a command and return True when it exits with status 0.

        Strings run via the shell; sequences run without a shell. A timeout
        is reported like a failed command, a missing binary raises
        CommandExecutionError.
        """
        if log:
            Log.debug(controller,
                      f"Running command: {LOShellExec._shown(command)}")
        try:
            proc = LOShellExec._run(controller, command, input_data=input_data,
                                    timeout=timeout, cwd=cwd,
                                    extra_env=extra_env)
        except subprocess.TimeoutExpired as e:
            Log.debug(controller, f"Timeout: {LOShellExec._redact(str(e))}")
            return False
        except OSError as e:
            Log.debug(controller, str(e))
            raise CommandExecutionError(str(e))
        return proc.returncode == 0

    @staticmethod
    def cmd_exec_stdout(controller, command, log: bool = True,
                        timeout: Optional[float] = None,
                        extra_env: Optional[Mapping[str, str]] = None) -> str:
        """Run a command and return its stdout, whatever the exit status.
        Empty on timeout."""
        if log:
            Log.debug(controller,
                      f"Running command: {LOShellExec._shown(command)}")
        try:
            proc = LOShellExec._run(controller, command, timeout=timeout,
                                    extra_env=extra_env)
        except subprocess.TimeoutExpired as e:
            Log.debug(controller, f"Timeout: {e}")
            return ''
        except OSError as e:
            Log.debug(controller, str(e))
            raise CommandExecutionError(str(e))
        return proc.stdout

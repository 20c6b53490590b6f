# clai/context/environment.py
"""
Per-invocation view of the terminal and process environment.

Values are looked up lazily on first access and cached on the instance, so a
new TerminalEnvironment always reflects the current process.
"""
import getpass
import os
import sys
from functools import cached_property
from pathlib import Path
from typing import Mapping, Optional, TextIO


def _isatty(stream: Optional[TextIO]) -> bool:
    if stream is None:
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        # Closed or replaced streams
        return False


class TerminalEnvironment:
    """Terminal facts for one clai invocation."""

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.environ = environ if environ is not None else os.environ

    @cached_property
    def stdin_is_tty(self) -> bool:
        return _isatty(self.stdin)

    @cached_property
    def stdout_is_tty(self) -> bool:
        return _isatty(self.stdout)

    @cached_property
    def stderr_is_tty(self) -> bool:
        return _isatty(self.stderr)

    @property
    def is_interactive(self) -> bool:
        """True when both the command source and destination are live terminals."""
        return self.stdin_is_tty and self.stdout_is_tty

    @cached_property
    def shell_path(self) -> str:
        return self.environ.get("SHELL") or "/bin/sh"

    @cached_property
    def shell_name(self) -> str:
        return Path(self.shell_path).name or "sh"

    @cached_property
    def user(self) -> str:
        user = self.environ.get("USER") or self.environ.get("LOGNAME")
        if user:
            return user
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return "unknown"

    @cached_property
    def home(self) -> Path:
        home = self.environ.get("HOME")
        return Path(home) if home else Path.home()

# clai/output/execute.py
"""
Running the chosen command in the user's shell.
"""
import asyncio
import os
import re
import shlex
from typing import Optional

from clai.constants import (
    EXIT_GENERAL,
    EXIT_NOT_FOUND,
    EXIT_PERMISSION_DENIED,
    EXIT_SAFETY,
    EXIT_SIGNAL,
    EXIT_TIMEOUT,
)
from clai.errors import ExecutionError
from clai.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SHELL = "/bin/sh"
KILL_GRACE_PERIOD = 1.0  # seconds between SIGTERM and SIGKILL

_RECURSIVE_CLAI = re.compile(r"(?:^|[|;&]\s*)(?:\./|/[\w/]*)?clai(?:\s|$)")


def validate_command(command: str) -> None:
    """
    Refuse commands that must never be run.

    Raises:
        ExecutionError: For an empty command or one that invokes clai itself.
    """
    if not command or not command.strip():
        raise ExecutionError("Cannot execute an empty command", code=EXIT_GENERAL)
    if _RECURSIVE_CLAI.search(command.strip()):
        raise ExecutionError("Refusing to run clai recursively", code=EXIT_SAFETY)


def _program_name(command: str) -> str:
    try:
        parts = shlex.split(command)
    except ValueError:
        parts = command.split()
    return parts[0] if parts else command


async def _stop(process: asyncio.subprocess.Process) -> None:
    process.terminate()
    try:
        await asyncio.wait_for(process.wait(), KILL_GRACE_PERIOD)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()


async def execute_command(
    command: str,
    shell: Optional[str] = None,
    timeout: Optional[float] = None,
) -> int:
    """
    Execute a command through ``$SHELL -c`` with inherited stdio.

    Args:
        command: The command to run.
        shell: Shell to use; defaults to $SHELL, then /bin/sh.
        timeout: Seconds before the command is stopped; None waits forever.

    Returns:
        The command's exit code.

    Raises:
        ExecutionError: If the command is refused, cannot be started, times
            out, is killed by a signal, or the shell reports 126/127.
    """
    validate_command(command)
    shell = shell or os.environ.get("SHELL") or DEFAULT_SHELL
    logger.info(f"Executing with {shell}: {command}")

    try:
        process = await asyncio.create_subprocess_exec(shell, "-c", command)
    except FileNotFoundError as e:
        raise ExecutionError(f"Shell not found: {shell}", code=EXIT_NOT_FOUND) from e
    except PermissionError as e:
        raise ExecutionError(f"Permission denied: {shell}", code=EXIT_PERMISSION_DENIED) from e
    except OSError as e:
        raise ExecutionError(f"Failed to start {shell}: {e}", code=EXIT_GENERAL) from e

    try:
        if timeout:
            returncode = await asyncio.wait_for(process.wait(), timeout)
        else:
            returncode = await process.wait()
    except asyncio.TimeoutError:
        await _stop(process)
        raise ExecutionError(f"Command timed out after {timeout:g}s", code=EXIT_TIMEOUT)
    except asyncio.CancelledError:
        await _stop(process)
        raise

    if returncode < 0:
        raise ExecutionError(f"Command terminated by signal {-returncode}", code=EXIT_SIGNAL)
    if returncode == EXIT_NOT_FOUND:
        raise ExecutionError(f"Command not found: {_program_name(command)}", code=EXIT_NOT_FOUND)
    if returncode == EXIT_PERMISSION_DENIED:
        raise ExecutionError(f"Permission denied: {_program_name(command)}", code=EXIT_PERMISSION_DENIED)

    logger.debug(f"Command exited with {returncode}")
    return returncode

# clai/context/gatherer.py
"""
Context gathering: system facts, directory listing, shell history and stdin.

Only the working directory is mandatory; every other source degrades to an
empty value when it cannot be read.
"""
import os
import platform
import re
from pathlib import Path
from typing import List, Optional

from clai.config import ContextConfig, RuntimeConfig
from clai.constants import MAX_STDIN_BYTES, PATH_TRUNCATE_LENGTH
from clai.context.environment import TerminalEnvironment
from clai.context.models import ContextBundle, SystemInfo
from clai.errors import ContextError
from clai.utils.logging import get_logger

logger = get_logger(__name__)

REDACTED = "[REDACTED]"

# History file locations relative to $HOME
HISTORY_FILES = {
    "bash": ".bash_history",
    "zsh": ".zsh_history",
    "fish": ".local/share/fish/fish_history",
    "sh": ".sh_history",
}

_ZSH_EXTENDED = re.compile(r"^: \d+:\d+;")
_FISH_ENTRY = re.compile(r"^- cmd: ")


def total_memory_mb() -> Optional[int]:
    """Physical memory in MiB, or None where sysconf cannot tell."""
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None
    if pages <= 0 or page_size <= 0:
        return None
    return (pages * page_size) // (1024 * 1024)


def gather_system_info(env: TerminalEnvironment) -> SystemInfo:
    return SystemInfo(
        os_name=platform.system() or "unknown",
        os_version=platform.release(),
        architecture=platform.machine(),
        shell=env.shell_name,
        user=env.user,
        total_memory_mb=total_memory_mb(),
    )


def get_cwd() -> Path:
    """
    Current working directory.

    Raises:
        ContextError: If the directory cannot be determined (e.g. it was deleted).
    """
    try:
        return Path.cwd()
    except OSError as e:
        raise ContextError(f"Failed to get current working directory: {e}") from e


def truncate_path(path: str, max_length: int = PATH_TRUNCATE_LENGTH) -> str:
    """Shorten an over-long path to its basename."""
    if len(path) <= max_length:
        return path
    return os.path.basename(path.rstrip("/")) or path


def redact_path(path: str, home: Path) -> str:
    """Replace the home directory (and ``~``) in a path with a placeholder."""
    home_str = str(home)
    redacted = path
    if home_str and home_str != "/":
        redacted = redacted.replace(home_str, REDACTED)
    if redacted == "~":
        return REDACTED
    if redacted.startswith("~/"):
        redacted = REDACTED + redacted[1:]
    return redacted


def scan_directory(cwd: Path, max_files: int) -> List[str]:
    """The first ``max_files`` entries of ``cwd``, sorted by name."""
    try:
        names = sorted(os.listdir(cwd))
    except OSError as e:
        logger.debug(f"Cannot list {cwd}: {e}")
        return []
    return [truncate_path(str(cwd / name)) for name in names[:max_files]]


def _clean_history_line(line: str) -> str:
    line = _ZSH_EXTENDED.sub("", line)
    line = _FISH_ENTRY.sub("", line)
    return line.strip()


def read_shell_history(env: TerminalEnvironment, max_history: int) -> List[str]:
    """
    Last non-empty lines of the current shell's history file.

    Args:
        env: The terminal environment, used for the shell name and $HOME.
        max_history: How many lines to return; 0 disables history.

    Returns:
        Up to ``max_history`` commands, oldest first.
    """
    if max_history <= 0:
        return []

    relative = HISTORY_FILES.get(env.shell_name)
    if relative is None:
        return []

    history_file = env.home / relative
    try:
        content = history_file.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    lines = []
    for raw in content.splitlines():
        # fish stores metadata lines such as "  when: 1700000000"
        if env.shell_name == "fish" and not raw.startswith("- cmd: "):
            continue
        line = _clean_history_line(raw)
        if line:
            lines.append(line)
    return lines[-max_history:]


def read_stdin(env: TerminalEnvironment) -> Optional[str]:
    """Piped input, capped at MAX_STDIN_BYTES. None when stdin is a terminal."""
    if env.stdin_is_tty:
        return None
    try:
        data = env.stdin.read(MAX_STDIN_BYTES + 1)
    except (OSError, ValueError) as e:
        logger.debug(f"Cannot read stdin: {e}")
        return None
    if not data:
        return None
    if len(data) > MAX_STDIN_BYTES:
        logger.info(f"Stdin truncated to {MAX_STDIN_BYTES} characters")
        data = data[:MAX_STDIN_BYTES]
    return data


def _apply_redaction(bundle: ContextBundle, options: ContextConfig, home: Path) -> ContextBundle:
    updates = {}
    if options.redact_paths:
        updates["cwd"] = redact_path(bundle.cwd, home)
        updates["files"] = [redact_path(f, home) for f in bundle.files]
    if options.redact_username:
        updates["system"] = bundle.system.model_copy(update={"user": REDACTED})
    return bundle.model_copy(update=updates) if updates else bundle


def gather_context(config: RuntimeConfig, env: TerminalEnvironment) -> ContextBundle:
    """
    Collect the context bundle for one invocation.

    Args:
        config: The runtime configuration (limits and redaction options).
        env: The per-invocation terminal environment.

    Returns:
        The gathered ContextBundle.

    Raises:
        ContextError: If the working directory cannot be determined.
    """
    options = config.file.context
    cwd = get_cwd()

    bundle = ContextBundle(
        system=gather_system_info(env),
        cwd=str(cwd),
        files=scan_directory(cwd, options.max_files),
        history=read_shell_history(env, options.max_history),
        stdin=read_stdin(env),
    )
    bundle = _apply_redaction(bundle, options, env.home)

    logger.debug(
        f"Context gathered: cwd={bundle.cwd}, {len(bundle.files)} files, "
        f"{len(bundle.history)} history lines, stdin={'yes' if bundle.stdin else 'no'}"
    )
    return bundle

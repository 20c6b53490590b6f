# clai/safety/patterns.py
"""
Dangerous-command detection by regular expression.

If any configured pattern fails to compile, every non-empty command is
reported as dangerous.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from clai.utils.logging import get_logger

logger = get_logger(__name__)

# Built-in patterns with a short description of what they catch
DEFAULT_DANGEROUS_PATTERNS: List[Tuple[str, str]] = [
    # File deletion
    (r"\brm\s+(-[^\s]*)?\s*-rf\s+/", "Recursive forced removal from root"),
    (r"\brm\s+(-[^\s]*\s+)*-[^\s-]*f", "Forced file deletion"),
    (r"\brm\s+(-[^\s]*\s+)*(-[^\s-]*[rR]|--recursive)", "Recursive file deletion"),
    (r"find\s+.*-exec\s+(rm|del)\b", "Deletion through find -exec"),

    # Disk and device operations
    (r"\bdd\s+.*if=/dev/(zero|random|urandom)", "Disk wipe with dd"),
    (r"\bdd\s+.*of=/dev/", "Raw device write"),
    (r"mkfs\.\w+\s+/dev/", "Filesystem creation on a device"),
    (r"mkfs\s+-t\s+\w+\s+/dev/", "Filesystem creation on a device"),
    (r"\bshred\s+", "Secure file deletion"),

    # Privileged destruction
    (r"sudo\s+rm\s+(-[^\s]*)?\s*-rf", "Privileged recursive removal"),
    (r"sudo\s+dd\s+", "Privileged dd"),
    (r"sudo\s+mkfs", "Privileged filesystem creation"),

    # Redirects to devices
    (r">\s*/dev/sd[a-z]", "Redirect to a disk device"),
    (r">\s*/dev/nvme", "Redirect to an NVMe device"),
    (r">\s*/dev/null.*<", "Suspicious null redirect"),

    # Databases
    (r"drop\s+database", "SQL DROP DATABASE"),
    (r"drop\s+table", "SQL DROP TABLE"),
    (r"truncate\s+table", "SQL TRUNCATE"),
    (r"delete\s+from\s+\w+\s*;?\s*$", "SQL DELETE without WHERE"),

    # Git history rewrites
    (r"git\s+reset\s+--hard", "Discard local changes"),
    (r"git\s+clean\s+-[^\s]*f[^\s]*d|git\s+clean\s+-[^\s]*d[^\s]*f", "Remove untracked files"),
    (r"git\s+push\s+.*(--force|-f\b)", "Force push"),

    # System modification
    (r"chmod\s+(-R\s+)?777\s+/", "World-writable permissions on root"),
    (r"chown\s+-R\s+\S+\s+/(\s|$)", "Recursive ownership change on root"),
    (r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:", "Fork bomb"),

    # Windows
    (r"format\s+[a-z]:", "Drive format"),
    (r"del\s+/[fqs]", "Forced delete"),
    (r"rd\s+/s\s+/q", "Recursive directory removal"),
]


@dataclass(frozen=True)
class DangerPattern:
    """One configured pattern and the result of compiling it."""
    source: str
    matcher: Optional[re.Pattern]
    description: str = ""

    @property
    def is_valid(self) -> bool:
        return self.matcher is not None


def compile_pattern(source: str, description: str = "") -> DangerPattern:
    try:
        return DangerPattern(source, re.compile(source, re.IGNORECASE), description)
    except re.error as e:
        logger.debug(f"Invalid danger pattern {source!r}: {e}")
        return DangerPattern(source, None, description)


class PatternMatcher:
    """Classifies commands against a list of danger patterns."""

    def __init__(self, patterns: Optional[Sequence[str]] = None):
        if patterns:
            self.patterns = [compile_pattern(p) for p in patterns]
        else:
            self.patterns = [compile_pattern(p, d) for p, d in DEFAULT_DANGEROUS_PATTERNS]

        self.invalid_patterns = [p.source for p in self.patterns if not p.is_valid]
        self.has_invalid = bool(self.invalid_patterns)
        if self.has_invalid:
            logger.warning(
                f"Invalid danger pattern(s) {self.invalid_patterns}; "
                "treating every command as dangerous"
            )

    def match(self, command: str) -> Optional[DangerPattern]:
        """Return the first pattern matching ``command``, if any."""
        for pattern in self.patterns:
            if pattern.matcher is not None and pattern.matcher.search(command):
                return pattern
        return None

    def is_dangerous(self, command: str) -> bool:
        """
        Decide whether a command is dangerous.

        Args:
            command: The command to check.

        Returns:
            False for a blank command; True for anything else when a
            pattern is invalid; otherwise whether any pattern matches.
        """
        if not command or not command.strip():
            return False
        if self.has_invalid:
            return True

        pattern = self.match(command)
        if pattern is not None:
            logger.debug(f"Command matched danger pattern {pattern.source!r}: {command}")
            return True
        return False

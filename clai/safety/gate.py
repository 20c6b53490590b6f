# clai/safety/gate.py
"""
Combines danger detection with the confirmation policy.
"""
from dataclasses import dataclass

from clai.ai.types import CommandSet
from clai.context.environment import TerminalEnvironment
from clai.safety.patterns import PatternMatcher
from clai.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SafetyVerdict:
    is_dangerous: bool
    should_prompt: bool

    @property
    def needs_warning(self) -> bool:
        """Dangerous but not confirmed interactively."""
        return self.is_dangerous and not self.should_prompt


class SafetyGate:
    """Decides whether the primary candidate needs the operator's confirmation."""

    def __init__(
        self,
        matcher: PatternMatcher,
        env: TerminalEnvironment,
        confirm_dangerous: bool = True,
        force: bool = False,
    ):
        self.matcher = matcher
        self.env = env
        self.confirm_dangerous = confirm_dangerous
        self.force = force

    def evaluate(self, command_set: CommandSet) -> SafetyVerdict:
        """
        Evaluate the primary candidate of a command set.

        A prompt is required only when the command is dangerous, confirmation
        is enabled, force was not requested, and both stdin and stdout are
        terminals.
        """
        return self.check(command_set.primary)

    def check(self, command: str) -> SafetyVerdict:
        """Evaluate a single command against the same policy."""
        dangerous = self.matcher.is_dangerous(command)
        should_prompt = (
            dangerous
            and self.confirm_dangerous
            and not self.force
            and self.env.is_interactive
        )
        if dangerous:
            logger.info(f"Dangerous command detected (prompt={should_prompt}): {command}")
        return SafetyVerdict(is_dangerous=dangerous, should_prompt=should_prompt)

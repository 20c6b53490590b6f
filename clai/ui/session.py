# clai/ui/session.py
"""
Selection session state machine.

A session walks IDLE -> ACTIVE -> COMPLETED and produces exactly one
SelectionOutcome. The cycling picker and the dangerous-command confirmation
share one key-to-transition table; terminal drivers only translate input
into Key events.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from clai.ai.types import CommandSet
from clai.utils.logging import get_logger

logger = get_logger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"


class SessionMode(Enum):
    CYCLE = "cycle"
    CONFIRM = "confirm"


class Action(str, Enum):
    EXECUTE = "execute"
    OUTPUT = "output"
    ABORT = "abort"


class Key(Enum):
    """Input events understood by the session."""
    NEXT = "next"
    PREVIOUS = "previous"
    SELECT = "select"
    TOGGLE = "toggle"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    TIMEOUT = "timeout"
    EXECUTE = "execute"
    OUTPUT = "output"
    ABORT = "abort"


@dataclass(frozen=True)
class SelectionOutcome:
    action: Action
    index: int
    command: str

    @property
    def proceeds(self) -> bool:
        """Execute and Output both let the command through."""
        return self.action in (Action.EXECUTE, Action.OUTPUT)


def key_for_confirmation_line(line: Optional[str]) -> Key:
    """
    Map one line of confirmation input to a key.

    The first non-whitespace character decides, case-insensitively:
    ``e`` executes, ``c`` or ``o`` outputs, ``a`` aborts. EOF (None), an
    empty line and anything else abort.
    """
    if line is None:
        return Key.ABORT
    stripped = line.strip()
    if not stripped:
        return Key.ABORT

    first = stripped[0].lower()
    if first == "e":
        return Key.EXECUTE
    if first in ("c", "o"):
        return Key.OUTPUT
    return Key.ABORT


Transition = Callable[["SelectionSession", Optional[int]], None]


class SelectionSession:
    """Interactive choice over a set of command candidates."""

    def __init__(
        self,
        commands: Union[CommandSet, Sequence[str]],
        is_dangerous: bool = False,
        mode: SessionMode = SessionMode.CYCLE,
    ):
        candidates: List[str] = list(commands.commands if isinstance(commands, CommandSet) else commands)
        if not candidates:
            raise ValueError("SelectionSession needs at least one command")

        self.commands = candidates
        self.is_dangerous = is_dangerous
        self.mode = mode
        self.state = SessionState.IDLE
        self.cursor = 0
        self.pending = Action.EXECUTE
        self.outcome: Optional[SelectionOutcome] = None

    # --- Queries ---

    @property
    def current_command(self) -> str:
        return self.commands[self.cursor]

    @property
    def labels(self) -> Tuple[str, str]:
        """Labels for the proceed and cancel actions."""
        if self.is_dangerous:
            return "Run", "Cancel"
        return "Execute", "Cancel"

    @property
    def pending_label(self) -> str:
        proceed, cancel = self.labels
        return proceed if self.pending == Action.EXECUTE else cancel

    @property
    def is_completed(self) -> bool:
        return self.state == SessionState.COMPLETED

    # --- Lifecycle ---

    def start(self, interactive: bool) -> Optional[SelectionOutcome]:
        """
        Leave IDLE.

        Args:
            interactive: Whether the destination is a live terminal.

        Returns:
            The outcome when the session completed immediately (non-interactive
            destinations get the first candidate), otherwise None.
        """
        if self.state != SessionState.IDLE:
            return self.outcome

        if not interactive:
            logger.debug("Non-interactive destination, selecting the first candidate")
            return self._complete(Action.EXECUTE)

        self.state = SessionState.ACTIVE
        self.cursor = 0
        self.pending = Action.EXECUTE
        return None

    def dispatch(self, key: Key, value: Optional[int] = None) -> Optional[SelectionOutcome]:
        """
        Feed one input event to the session.

        Keys with no transition in the current mode are ignored. Once
        completed, the session keeps returning the same outcome.

        Args:
            key: The input event.
            value: Candidate number for Key.SELECT (zero-based).

        Returns:
            The outcome if the session is completed, otherwise None.
        """
        if self.state != SessionState.ACTIVE:
            return self.outcome

        transition = self._TRANSITIONS.get((self.mode, key))
        if transition is None:
            logger.debug(f"Ignoring {key.name} in {self.mode.name} mode")
            return None

        transition(self, value)
        return self.outcome

    # --- Transitions ---

    def _complete(self, action: Action) -> SelectionOutcome:
        self.outcome = SelectionOutcome(action=action, index=self.cursor, command=self.current_command)
        self.state = SessionState.COMPLETED
        logger.debug(f"Session completed: {action.value} #{self.cursor}")
        return self.outcome

    def _next(self, value: Optional[int]) -> None:
        if len(self.commands) > 1:
            self.cursor = (self.cursor + 1) % len(self.commands)

    def _previous(self, value: Optional[int]) -> None:
        if len(self.commands) > 1:
            self.cursor = (self.cursor - 1) % len(self.commands)

    def _select(self, value: Optional[int]) -> None:
        if value is not None and 0 <= value < len(self.commands):
            self.cursor = value

    def _toggle(self, value: Optional[int]) -> None:
        self.pending = Action.ABORT if self.pending == Action.EXECUTE else Action.EXECUTE

    def _confirm(self, value: Optional[int]) -> None:
        self._complete(self.pending)

    def _abort(self, value: Optional[int]) -> None:
        self._complete(Action.ABORT)

    def _execute(self, value: Optional[int]) -> None:
        self._complete(Action.EXECUTE)

    def _output(self, value: Optional[int]) -> None:
        self._complete(Action.OUTPUT)

    _TRANSITIONS: Dict[Tuple[SessionMode, Key], Transition] = {
        (SessionMode.CYCLE, Key.NEXT): _next,
        (SessionMode.CYCLE, Key.PREVIOUS): _previous,
        (SessionMode.CYCLE, Key.SELECT): _select,
        (SessionMode.CYCLE, Key.TOGGLE): _toggle,
        (SessionMode.CYCLE, Key.CONFIRM): _confirm,
        (SessionMode.CYCLE, Key.CANCEL): _abort,
        (SessionMode.CYCLE, Key.TIMEOUT): _abort,
        (SessionMode.CONFIRM, Key.EXECUTE): _execute,
        (SessionMode.CONFIRM, Key.OUTPUT): _output,
        (SessionMode.CONFIRM, Key.ABORT): _abort,
        (SessionMode.CONFIRM, Key.CANCEL): _abort,
        (SessionMode.CONFIRM, Key.TIMEOUT): _abort,
    }

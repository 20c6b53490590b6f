# clai/ui/terminal.py
"""
Terminal driver for the cycling selection session.

Renders the current candidate with prompt_toolkit and turns key presses into
session events. The wait is raced against the inactivity timeout.
"""
import asyncio
import sys
from typing import Awaitable, Callable, List, Optional, Tuple

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.output import create_output
from prompt_toolkit.styles import Style

from clai.ui.session import Action, Key, SelectionOutcome, SelectionSession
from clai.utils.logging import get_logger

logger = get_logger(__name__)

SESSION_STYLE = Style.from_dict({
    "index": "ansicyan bold",
    "command": "bold",
    "danger": "ansired bold",
    "action": "ansigreen bold",
    "cancel": "ansiyellow bold",
    "hint": "ansibrightblack",
})

# Key names mapped to session events
KEY_MAP: List[Tuple[Tuple[str, ...], Key]] = [
    (("tab",), Key.NEXT),
    (("right",), Key.NEXT),
    (("left",), Key.PREVIOUS),
    (("s-tab",), Key.PREVIOUS),
    (("up",), Key.TOGGLE),
    (("down",), Key.TOGGLE),
    (("enter",), Key.CONFIRM),
    (("escape",), Key.CANCEL),
    (("c-c",), Key.CANCEL),
    (("c-d",), Key.CANCEL),
]

AppRunner = Callable[[SelectionSession], Awaitable[None]]


def render_session(session: SelectionSession) -> List[Tuple[str, str]]:
    """Formatted text for the current state of a cycling session."""
    total = len(session.commands)
    proceed, cancel = session.labels
    pending_style = "class:action" if session.pending == Action.EXECUTE else "class:cancel"

    fragments: List[Tuple[str, str]] = [
        ("class:index", f"[{session.cursor + 1}/{total}] "),
        ("class:command", session.current_command),
        ("", "\n"),
    ]
    if session.is_dangerous:
        fragments.append(("class:danger", "DANGEROUS  "))
    fragments.extend([
        (pending_style, f"> {session.pending_label}"),
        ("class:hint", f"   Tab/arrows: cycle  Up/Down: {proceed}/{cancel}  Enter: confirm  Esc: cancel"),
    ])
    return fragments


def build_key_bindings(session: SelectionSession) -> KeyBindings:
    kb = KeyBindings()

    def bind(keys: Tuple[str, ...], key: Key, value: Optional[int] = None) -> None:
        @kb.add(*keys)
        def _(event):
            outcome = session.dispatch(key, value)
            if outcome is not None:
                event.app.exit()

    for keys, key in KEY_MAP:
        bind(keys, key)

    # Digits pick a candidate directly: 1-9, and 0 for the tenth
    for number in range(1, 10):
        bind((str(number),), Key.SELECT, number - 1)
    bind(("0",), Key.SELECT, 9)

    return kb


async def _run_application(session: SelectionSession) -> None:
    app: Application = Application(
        layout=Layout(Window(FormattedTextControl(lambda: render_session(session)), wrap_lines=True)),
        key_bindings=build_key_bindings(session),
        style=SESSION_STYLE,
        full_screen=False,
        erase_when_done=True,
        # Keep stdout free for the chosen command
        output=create_output(stdout=sys.stderr),
    )
    await app.run_async()


async def run_cycle_session(
    session: SelectionSession,
    timeout: Optional[float] = None,
    run_app: Optional[AppRunner] = None,
) -> SelectionOutcome:
    """
    Drive an already started cycling session to completion.

    Args:
        session: A session in the ACTIVE state.
        timeout: Seconds from now before the session aborts; None waits forever.
        run_app: Coroutine function reading keys into the session. Defaults to
            the prompt_toolkit application.

    Returns:
        The session outcome. Timeouts and interrupts resolve to Abort.
    """
    runner = run_app or _run_application
    try:
        if timeout:
            await asyncio.wait_for(runner(session), timeout)
        else:
            await runner(session)
    except asyncio.TimeoutError:
        logger.info(f"No selection within {timeout:g}s, aborting")
        session.dispatch(Key.TIMEOUT)
    except (KeyboardInterrupt, EOFError):
        session.dispatch(Key.CANCEL)

    if not session.is_completed:
        # The input ended without a decision
        session.dispatch(Key.CANCEL)
    return session.outcome

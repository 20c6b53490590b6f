# clai/safety/confirmation.py
"""
Confirmation prompt for dangerous commands.

Shows a warning on stderr and reads a single line: [E]xecute, [C]opy or
[A]bort. Anything unexpected, EOF and the timeout all abort.
"""
import asyncio
import sys
from typing import Awaitable, Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.output import create_output
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from clai.ui.session import Key, SelectionOutcome, SelectionSession, SessionMode, key_for_confirmation_line
from clai.utils.logging import get_logger

logger = get_logger(__name__)

CONFIRMATION_PROMPT = "[E]xecute/[C]opy/[A]bort? "

LineReader = Callable[[str], Awaitable[Optional[str]]]


async def _prompt_line(message: str) -> Optional[str]:
    """Read one line with prompt_toolkit; None on EOF."""
    session: PromptSession = PromptSession(output=create_output(stdout=sys.stderr))
    try:
        return await session.prompt_async(HTML(f"<ansiyellow>{message}</ansiyellow>"))
    except EOFError:
        return None


def show_danger_warning(command: str, console: Console) -> None:
    console.print(Panel(
        Syntax(command, "bash", theme="monokai", word_wrap=True),
        title="[bold red]⚠️  DANGEROUS[/bold red]",
        border_style="red",
        expand=False,
    ))


async def confirm_dangerous_command(
    command: str,
    timeout: Optional[float] = None,
    console: Optional[Console] = None,
    read_line: Optional[LineReader] = None,
) -> SelectionOutcome:
    """
    Ask the operator what to do with a dangerous command.

    Args:
        command: The dangerous command.
        timeout: Seconds to wait for an answer; None waits forever.
        console: Console for the warning. Defaults to stderr.
        read_line: Coroutine function returning one input line or None on EOF.

    Returns:
        The outcome of a CONFIRM-mode session over the single command.
    """
    console = console or Console(stderr=True)
    reader = read_line or _prompt_line

    session = SelectionSession([command], is_dangerous=True, mode=SessionMode.CONFIRM)
    session.start(interactive=True)
    show_danger_warning(command, console)

    try:
        if timeout:
            line = await asyncio.wait_for(reader(CONFIRMATION_PROMPT), timeout)
        else:
            line = await reader(CONFIRMATION_PROMPT)
    except asyncio.TimeoutError:
        logger.info(f"No answer within {timeout:g}s, aborting")
        return session.dispatch(Key.TIMEOUT)
    except KeyboardInterrupt:
        return session.dispatch(Key.CANCEL)

    return session.dispatch(key_for_confirmation_line(line))

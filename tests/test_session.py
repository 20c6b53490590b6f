# tests/test_session.py
"""Tests for the selection session state machine and its terminal drivers."""
import asyncio
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from clai.ai.types import CommandSet
from clai.safety.confirmation import confirm_dangerous_command
from clai.ui.session import (
    Action,
    Key,
    SelectionSession,
    SessionMode,
    SessionState,
    key_for_confirmation_line,
)
from clai.ui.terminal import build_key_bindings, render_session, run_cycle_session

from tests.conftest import MockStream

COMMANDS = ["ls", "ls -la", "ls -lah"]


@pytest.fixture
def session():
    s = SelectionSession(COMMANDS)
    s.start(interactive=True)
    return s


def test_non_interactive_start_completes_with_first_candidate():
    session = SelectionSession(CommandSet(commands=COMMANDS))
    outcome = session.start(interactive=False)

    assert session.state == SessionState.COMPLETED
    assert outcome.action == Action.EXECUTE
    assert outcome.index == 0
    assert outcome.command == "ls"


def test_interactive_start_is_active(session):
    assert session.state == SessionState.ACTIVE
    assert session.cursor == 0
    assert session.pending == Action.EXECUTE


def test_cycling_wraps_around(session):
    session.dispatch(Key.NEXT)
    session.dispatch(Key.NEXT)
    assert session.cursor == 2
    session.dispatch(Key.NEXT)
    assert session.cursor == 0
    session.dispatch(Key.PREVIOUS)
    assert session.cursor == 2


def test_cycling_single_candidate_does_nothing():
    session = SelectionSession(["pwd"])
    session.start(interactive=True)
    session.dispatch(Key.NEXT)
    assert session.cursor == 0
    assert session.state == SessionState.ACTIVE


def test_select_by_number(session):
    session.dispatch(Key.SELECT, 2)
    assert session.cursor == 2
    session.dispatch(Key.SELECT, 7)
    assert session.cursor == 2


def test_toggle_keeps_cursor(session):
    session.dispatch(Key.NEXT)
    session.dispatch(Key.TOGGLE)
    assert session.pending == Action.ABORT
    assert session.cursor == 1
    session.dispatch(Key.TOGGLE)
    assert session.pending == Action.EXECUTE


def test_confirm_uses_pending_action_and_cursor(session):
    session.dispatch(Key.NEXT)
    outcome = session.dispatch(Key.CONFIRM)
    assert outcome.action == Action.EXECUTE
    assert outcome.index == 1
    assert outcome.command == "ls -la"
    assert outcome.proceeds


def test_confirm_after_toggle_aborts(session):
    session.dispatch(Key.TOGGLE)
    outcome = session.dispatch(Key.CONFIRM)
    assert outcome.action == Action.ABORT
    assert not outcome.proceeds


@pytest.mark.parametrize("key", [Key.CANCEL, Key.TIMEOUT])
def test_cancel_and_timeout_abort_regardless_of_pending(session, key):
    outcome = session.dispatch(key)
    assert outcome.action == Action.ABORT


def test_completed_is_final(session):
    first = session.dispatch(Key.CONFIRM)
    assert session.dispatch(Key.CANCEL) is first
    assert session.dispatch(Key.NEXT) is first
    assert session.start(interactive=True) is first


def test_confirm_mode_ignores_cycle_keys():
    session = SelectionSession(["rm -rf build"], is_dangerous=True, mode=SessionMode.CONFIRM)
    session.start(interactive=True)
    assert session.dispatch(Key.NEXT) is None
    assert session.dispatch(Key.CONFIRM) is None
    assert session.state == SessionState.ACTIVE
    assert session.dispatch(Key.OUTPUT).action == Action.OUTPUT


def test_cycle_mode_ignores_confirm_keys(session):
    assert session.dispatch(Key.EXECUTE) is None
    assert session.state == SessionState.ACTIVE


def test_labels_depend_on_danger():
    assert SelectionSession(["ls"]).labels == ("Execute", "Cancel")
    assert SelectionSession(["rm -rf /"], is_dangerous=True).labels == ("Run", "Cancel")


def test_empty_session_rejected():
    with pytest.raises(ValueError):
        SelectionSession([])


@pytest.mark.parametrize("line, key", [
    ("e", Key.EXECUTE),
    ("E", Key.EXECUTE),
    ("  execute", Key.EXECUTE),
    ("c", Key.OUTPUT),
    ("O", Key.OUTPUT),
    ("a", Key.ABORT),
    ("A", Key.ABORT),
    ("", Key.ABORT),
    ("   ", Key.ABORT),
    ("yes", Key.ABORT),
    (None, Key.ABORT),
])
def test_confirmation_line_mapping(line, key):
    assert key_for_confirmation_line(line) == key


# --- Cycling driver ---

@pytest.mark.asyncio
async def test_cycle_driver_returns_selection(session):
    async def press_keys(s):
        s.dispatch(Key.NEXT)
        s.dispatch(Key.CONFIRM)

    outcome = await run_cycle_session(session, timeout=5, run_app=press_keys)
    assert outcome.command == "ls -la"
    assert outcome.action == Action.EXECUTE


@pytest.mark.asyncio
async def test_cycle_driver_timeout_aborts(session):
    async def never_answer(s):
        await asyncio.sleep(10)

    outcome = await run_cycle_session(session, timeout=0.01, run_app=never_answer)
    assert outcome.action == Action.ABORT


@pytest.mark.asyncio
async def test_cycle_driver_input_ending_without_decision_aborts(session):
    outcome = await run_cycle_session(session, run_app=AsyncMock())
    assert outcome.action == Action.ABORT


def test_render_session_shows_position_and_label(session):
    session.dispatch(Key.NEXT)
    text = "".join(fragment for _, fragment in render_session(session))
    assert "[2/3] ls -la" in text
    assert "> Execute" in text


def test_key_bindings_cover_digits(session):
    bindings = build_key_bindings(session)
    assert len(bindings.bindings) == 20


# --- Dangerous confirmation ---

def _quiet_console():
    return Console(file=MockStream(), force_terminal=False)


@pytest.mark.asyncio
@pytest.mark.parametrize("answer, action", [
    ("e", Action.EXECUTE),
    ("c", Action.OUTPUT),
    ("a", Action.ABORT),
    ("", Action.ABORT),
    (None, Action.ABORT),
])
async def test_confirm_dangerous_command_answers(answer, action):
    reader = AsyncMock(return_value=answer)
    outcome = await confirm_dangerous_command("rm -rf build", console=_quiet_console(), read_line=reader)

    assert outcome.action == action
    assert outcome.command == "rm -rf build"
    reader.assert_awaited_once()


@pytest.mark.asyncio
async def test_confirm_dangerous_command_timeout():
    async def never_answer(prompt):
        await asyncio.sleep(10)

    outcome = await confirm_dangerous_command(
        "rm -rf build", timeout=0.01, console=_quiet_console(), read_line=never_answer
    )
    assert outcome.action == Action.ABORT


@pytest.mark.asyncio
async def test_confirm_dangerous_command_shows_warning():
    stream = MockStream()
    await confirm_dangerous_command(
        "rm -rf build", console=Console(file=stream, force_terminal=False), read_line=AsyncMock(return_value="a")
    )
    assert "DANGEROUS" in stream.getvalue()
    assert "rm -rf build" in stream.getvalue()

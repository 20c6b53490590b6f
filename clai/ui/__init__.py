# clai/ui/__init__.py
"""
Interactive selection for clai.
"""
from clai.ui.session import (
    Action,
    Key,
    SelectionOutcome,
    SelectionSession,
    SessionMode,
    SessionState,
    key_for_confirmation_line,
)

__all__ = [
    "Action",
    "Key",
    "SelectionOutcome",
    "SelectionSession",
    "SessionMode",
    "SessionState",
    "key_for_confirmation_line",
]

# clai/context/__init__.py
"""
Context gathering for clai.
"""
from clai.context.environment import TerminalEnvironment
from clai.context.gatherer import gather_context
from clai.context.models import ContextBundle, SystemInfo

__all__ = ["TerminalEnvironment", "gather_context", "ContextBundle", "SystemInfo"]

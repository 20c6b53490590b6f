# tests/conftest.py
"""
Common test fixtures for clai.
"""
import io
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

import pytest

from clai.ai.types import ChatRequest, ChatResponse
from clai.config import FileConfig, RuntimeConfig
from clai.context.environment import TerminalEnvironment
from clai.context.models import ContextBundle, SystemInfo


class MockStream(io.StringIO):
    """A text stream that can pretend to be a terminal."""

    def __init__(self, initial: str = "", tty: bool = False):
        super().__init__(initial)
        self._tty = tty

    def isatty(self) -> bool:
        return self._tty


class FakeBackend:
    """Backend double returning canned responses or raising canned errors."""

    def __init__(self, name: str, content: Optional[str] = None, error: Optional[Exception] = None,
                 available: bool = True):
        self.name = name
        self.content = content
        self.error = error
        self.available = available
        self.requests: List[ChatRequest] = []

    def is_available(self) -> bool:
        return self.available

    async def complete(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return ChatResponse(content=self.content or "", model=request.model)


def make_env(stdin_tty: bool = True, stdout_tty: bool = True, stdin_text: str = "",
             environ: Optional[dict] = None) -> TerminalEnvironment:
    return TerminalEnvironment(
        stdin=MockStream(stdin_text, tty=stdin_tty),
        stdout=MockStream(tty=stdout_tty),
        stderr=MockStream(tty=False),
        environ=environ if environ is not None else {"SHELL": "/bin/bash", "USER": "tester", "HOME": "/home/tester"},
    )


def make_config(file: Optional[dict] = None, **overrides) -> RuntimeConfig:
    return RuntimeConfig(file=FileConfig(**(file or {})), **overrides)


@pytest.fixture
def temp_project_dir():
    """Create a temporary directory and make it the working directory."""
    temp_dir = tempfile.mkdtemp()
    old_dir = os.getcwd()
    os.chdir(temp_dir)
    yield Path(temp_dir)
    os.chdir(old_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def interactive_env():
    """Both stdin and stdout are terminals."""
    return make_env(stdin_tty=True, stdout_tty=True)


@pytest.fixture
def piped_env():
    """stdout is redirected to a pipe."""
    return make_env(stdin_tty=True, stdout_tty=False)


@pytest.fixture
def runtime_config():
    """Default runtime configuration with prompts disabled."""
    return make_config({"ui": {"prompt_timeout": 0}})


@pytest.fixture
def context_bundle():
    return ContextBundle(
        system=SystemInfo(os_name="Linux", os_version="6.1", architecture="x86_64",
                          shell="bash", user="tester", total_memory_mb=16000),
        cwd="/home/tester/project",
        files=["/home/tester/project/README.md", "/home/tester/project/src"],
        history=["git status", "ls -la"],
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the real environment out of configuration lookups."""
    for name in ("OPENROUTER_API_KEY", "CLAI_MODEL", "CLAI_PROVIDER", "MOCK_AI"):
        monkeypatch.delenv(name, raising=False)

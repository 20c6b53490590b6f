# clai/ai/backends/__init__.py
"""
Chat-completion backends.

Every backend exposes ``name``, ``is_available()`` and an async
``complete(request)``. New backends are registered in BACKENDS.
"""
from typing import TYPE_CHECKING, Callable, Dict, Protocol, runtime_checkable

from clai.ai.backends.mock import MockBackend
from clai.ai.backends.openrouter import OpenRouterBackend
from clai.ai.types import ChatRequest, ChatResponse
from clai.errors import AIError

if TYPE_CHECKING:
    from clai.config import RuntimeConfig


@runtime_checkable
class Backend(Protocol):
    name: str

    def is_available(self) -> bool:
        ...

    async def complete(self, request: ChatRequest) -> ChatResponse:
        ...


def _openrouter(config: "RuntimeConfig") -> Backend:
    settings = config.provider_settings(OpenRouterBackend.name)
    return OpenRouterBackend(
        api_key=config.api_key_for(OpenRouterBackend.name),
        default_model=settings.model,
        endpoint=settings.endpoint,
    )


def _mock(config: "RuntimeConfig") -> Backend:
    return MockBackend()


BACKENDS: Dict[str, Callable[["RuntimeConfig"], Backend]] = {
    OpenRouterBackend.name: _openrouter,
    MockBackend.name: _mock,
}


def create_backend(name: str, config: "RuntimeConfig") -> Backend:
    """
    Build the backend registered under ``name``.

    Raises:
        AIError: If no backend has that name.
    """
    factory = BACKENDS.get(name)
    if factory is None:
        raise AIError(f"Unknown backend: {name}")
    return factory(config)


__all__ = ["Backend", "BACKENDS", "MockBackend", "OpenRouterBackend", "create_backend"]

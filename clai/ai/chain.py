# clai/ai/chain.py
"""
Ordered fallback across backends.
"""
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from clai.ai.backends import Backend, create_backend
from clai.ai.types import ChatRequest, ChatResponse
from clai.constants import MODEL_SEPARATOR
from clai.errors import AIError, NoAvailableBackendError
from clai.utils.logging import get_logger

if TYPE_CHECKING:
    from clai.config import RuntimeConfig

logger = get_logger(__name__)

BackendFactory = Callable[[str, "RuntimeConfig"], Backend]


def chain_order(config: "RuntimeConfig") -> List[str]:
    """
    Backend names in the order they are tried.

    The primary backend comes first. When ``--provider`` overrides it, the
    configured default follows as the first fallback, then the configured
    fallbacks, without duplicates. MOCK_AI=1 replaces the whole chain with
    the mock.
    """
    if config.mock_ai:
        return ["mock"]

    names: List[str] = []
    candidates = [config.primary_provider, config.file.provider.default, *config.file.provider.fallback]
    for name in candidates:
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


class BackendChain:
    """Tries each backend in turn until one answers."""

    def __init__(
        self,
        names: List[str],
        config: "RuntimeConfig",
        factory: BackendFactory = create_backend,
    ):
        self.names = list(names)
        self._config = config
        self._factory = factory
        self._backends: Dict[str, Backend] = {}

    @classmethod
    def from_config(cls, config: "RuntimeConfig", factory: BackendFactory = create_backend) -> "BackendChain":
        return cls(chain_order(config), config, factory)

    @property
    def primary(self) -> Optional[str]:
        return self.names[0] if self.names else None

    def route_model(self, model: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """
        Work out which backend a requested model applies to.

        ``"<backend>/<model>"`` targets that backend when it is part of this
        chain. Any other string, including provider-qualified model ids such
        as ``openai/gpt-4o``, targets the primary backend unchanged.

        Returns:
            A ``(backend_name, model)`` pair; both are None when no model was requested.
        """
        if not model:
            return None, None
        prefix, sep, rest = model.partition(MODEL_SEPARATOR)
        if sep and rest and prefix in self.names:
            return prefix, rest
        return self.primary, model

    def _backend(self, name: str) -> Backend:
        backend = self._backends.get(name)
        if backend is None:
            backend = self._factory(name, self._config)
            self._backends[name] = backend
        return backend

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """
        Send the request to the first backend that succeeds.

        Raises:
            NoAvailableBackendError: If no backend could be attempted.
            AIError: The failure of the last backend attempted.
        """
        target, routed_model = self.route_model(request.model)
        last_error: Optional[AIError] = None

        for name in self.names:
            try:
                backend = self._backend(name)
            except AIError as e:
                logger.warning(f"Skipping backend '{name}': {e.message}")
                last_error = e
                continue

            if not backend.is_available():
                logger.info(f"Backend '{name}' is not available, skipping")
                continue

            model = routed_model if name == target else None
            try:
                logger.debug(f"Trying backend '{name}' with model {model or '(default)'}")
                response = await backend.complete(request.with_model(model))
            except AIError as e:
                logger.warning(f"Backend '{name}' failed: {e.message}")
                last_error = e
                continue

            logger.info(f"Backend '{name}' answered")
            return response

        if last_error is not None:
            raise last_error
        raise NoAvailableBackendError(
            f"No AI backend is available (tried: {', '.join(self.names) or 'none'}). "
            "Set OPENROUTER_API_KEY or configure a provider."
        )

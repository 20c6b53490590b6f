# clai/ai/backends/openrouter.py
"""
OpenRouter chat-completions backend.
"""
import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import aiohttp
from pydantic import ValidationError

from clai.ai.types import ChatRequest, ChatResponse, Usage
from clai.constants import (
    APP_NAME,
    DEFAULT_OPENROUTER_MODEL,
    OPENROUTER_API_URL,
    RATE_LIMIT_BASE_DELAY,
    RATE_LIMIT_RETRIES,
    REQUEST_TIMEOUT,
)
from clai.errors import (
    ApiError,
    AuthError,
    BackendTimeoutError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
)
from clai.utils.logging import get_logger

logger = get_logger(__name__)

REFERER = "https://github.com/clai"
MAX_ERROR_BODY = 500


class OpenRouterBackend:
    """Sends ChatRequests to OpenRouter's OpenAI-compatible endpoint."""

    name = "openrouter"

    def __init__(
        self,
        api_key: Optional[str],
        default_model: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self.default_model = default_model
        self.endpoint = endpoint or OPENROUTER_API_URL
        self.timeout = timeout
        self._sleep = sleep

    def is_available(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def resolve_model(self, requested: Optional[str]) -> str:
        return requested or self.default_model or DEFAULT_OPENROUTER_MODEL

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.resolve_model(request.model),
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        return payload

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": REFERER,
            "X-Title": APP_NAME,
        }

    async def _send(self, payload: Dict[str, Any]) -> Tuple[int, str]:
        """POST the payload and return the status code and raw body."""
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.endpoint, json=payload, headers=self._headers()) as response:
                return response.status, await response.text()

    async def _post_with_retry(self, payload: Dict[str, Any]) -> str:
        retries_left = RATE_LIMIT_RETRIES
        delay = RATE_LIMIT_BASE_DELAY
        attempt = 0

        while True:
            attempt += 1
            logger.debug(f"OpenRouter request (attempt {attempt}) model={payload['model']}")
            try:
                status, body = await self._send(payload)
            except asyncio.TimeoutError as e:
                raise BackendTimeoutError(f"Request to OpenRouter timed out after {self.timeout}s") from e
            except aiohttp.ClientError as e:
                if attempt == 1:
                    logger.warning(f"Transport error talking to OpenRouter, retrying once: {e}")
                    continue
                raise NetworkError(f"Failed to reach OpenRouter: {e}") from e

            if status == 429:
                if retries_left > 0:
                    retries_left -= 1
                    logger.warning(f"OpenRouter rate limit hit, retrying in {delay:g}s")
                    await self._sleep(delay)
                    delay *= 2
                    continue
                raise RateLimitError("OpenRouter rate limit exceeded", status_code=429)

            if 200 <= status < 300:
                return body

            self._raise_for_status(status, body)

    @staticmethod
    def _raise_for_status(status: int, body: str) -> None:
        body = (body or "")[:MAX_ERROR_BODY]
        if status in (401, 403):
            raise AuthError(f"Authentication failed ({status}): check your OpenRouter API key", status_code=status)
        if status in (408, 504):
            raise BackendTimeoutError(f"OpenRouter timed out ({status})", status_code=status)
        raise ApiError(status, body)

    @staticmethod
    def parse_response(body: str) -> ChatResponse:
        """
        Turn a 2xx body into a ChatResponse.

        Raises:
            MalformedResponseError: If the body is not JSON or has no message content.
        """
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, TypeError) as e:
            raise MalformedResponseError(f"OpenRouter returned invalid JSON: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError("OpenRouter response has no message content") from e

        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError("OpenRouter response has empty message content")

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict):
            try:
                usage = Usage(
                    prompt_tokens=raw_usage.get("prompt_tokens") or 0,
                    completion_tokens=raw_usage.get("completion_tokens") or 0,
                    total_tokens=raw_usage.get("total_tokens") or 0,
                )
            except ValidationError as e:
                logger.debug(f"Ignoring malformed usage block: {e}")

        model = data.get("model")
        return ChatResponse(content=content, model=model if isinstance(model, str) else None, usage=usage)

    async def complete(self, request: ChatRequest) -> ChatResponse:
        payload = self.build_payload(request)
        body = await self._post_with_retry(payload)
        response = self.parse_response(body)
        logger.debug(f"OpenRouter response received. Length: {len(response.content)}")
        return response

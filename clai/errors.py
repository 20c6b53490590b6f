# clai/errors.py
"""
Exception hierarchy for clai.

Every error carries the process exit code it maps to at the CLI boundary.
"""
from typing import Optional

from clai.constants import (
    EXIT_API,
    EXIT_CONFIG,
    EXIT_GENERAL,
    EXIT_INTERRUPTED,
    EXIT_SAFETY,
    EXIT_USAGE,
)


class ClaiError(Exception):
    """Base class for all clai errors."""

    code: int = EXIT_GENERAL

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class UsageError(ClaiError):
    """Invalid command-line input."""
    code = EXIT_USAGE


class EmptyInstructionError(UsageError):
    """The instruction was empty after trimming."""

    def __init__(self, message: str = "Instruction must not be empty"):
        super().__init__(message)


class ConfigError(ClaiError):
    """A configuration file could not be read or validated."""
    code = EXIT_CONFIG


class ContextError(ClaiError):
    """Context gathering failed in a way that cannot be skipped."""
    pass


class AIError(ClaiError):
    """Base class for backend and response-extraction failures."""

    code = EXIT_API

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NoAvailableBackendError(AIError):
    """No backend in the chain could be attempted."""
    pass


class AuthError(AIError):
    """The backend rejected the credential (401/403)."""
    pass


class RateLimitError(AIError):
    """The backend kept answering 429 after all retries."""
    pass


class BackendTimeoutError(AIError):
    """The backend timed out (408/504 or the client-side deadline)."""
    pass


class NetworkError(AIError):
    """The request never produced an HTTP response."""
    pass


class MalformedResponseError(AIError):
    """A 2xx response that does not contain usable content."""
    pass


class ApiError(AIError):
    """Any other non-2xx response."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"API error ({status_code}): {body or 'Unknown error'}", status_code)
        self.body = body


class EmptyResponseError(AIError):
    """The response text did not contain a command."""
    pass


class UserAbort(ClaiError):
    """The operator declined the command. This is an outcome, not a failure."""

    code = EXIT_SAFETY

    def __init__(self, message: str = "Command rejected by user"):
        super().__init__(message)


class ExecutionError(ClaiError):
    """The chosen command could not be executed."""
    pass


class InterruptError(ClaiError):
    """SIGINT or SIGTERM arrived while the pipeline was running."""

    code = EXIT_INTERRUPTED

    def __init__(self, message: str = "Interrupted"):
        super().__init__(message)

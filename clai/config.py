# clai/config.py
"""
Configuration management for clai.

Settings come from layered TOML files, the environment (including a ``.env``
file) and command-line overrides, in increasing order of precedence.
"""
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from clai.constants import (
    DEFAULT_PROMPT_TIMEOUT_MS,
    DEFAULT_PROVIDER,
    LOCAL_CONFIG_FILE_NAME,
    MAX_OPTIONS,
    MAX_PROMPT_TIMEOUT_MS,
    MIN_OPTIONS,
    OPENROUTER_API_KEY_ENV,
    SYSTEM_CONFIG_FILE,
    USER_CONFIG_FILE,
)
from clai.errors import ConfigError
from clai.utils.logging import get_logger

logger = get_logger(__name__)

ColorMode = Literal["auto", "always", "never"]


# --- Configuration Models ---

class ProviderSettings(BaseModel):
    """Settings for one named backend."""
    api_key: Optional[str] = Field(None, description="API key stored directly in the config file")
    api_key_env: Optional[str] = Field(None, description="Environment variable holding the API key")
    model: Optional[str] = Field(None, description="Default model for this backend")
    endpoint: Optional[str] = Field(None, description="Override for the backend URL")


class ProviderConfig(BaseModel):
    """Backend selection and fallback order."""
    default: str = Field(DEFAULT_PROVIDER, description="Primary backend")
    fallback: List[str] = Field(default_factory=list, description="Backends tried after the primary")


class ContextConfig(BaseModel):
    """Limits and privacy options for context gathering."""
    max_files: int = Field(10, ge=1, le=100)
    max_history: int = Field(3, ge=0, le=50)
    redact_paths: bool = False
    redact_username: bool = False


class SafetyConfig(BaseModel):
    """Dangerous-command detection settings."""
    confirm_dangerous: bool = Field(True, description="Prompt before emitting a dangerous command")
    dangerous_patterns: List[str] = Field(
        default_factory=list, description="Regex patterns; empty means the built-in list"
    )


class UIConfig(BaseModel):
    """Terminal interaction settings."""
    color: ColorMode = "auto"
    interactive: bool = False
    prompt_timeout: int = Field(
        DEFAULT_PROMPT_TIMEOUT_MS, ge=0, le=MAX_PROMPT_TIMEOUT_MS,
        description="Milliseconds before an unanswered prompt aborts; 0 disables",
    )
    debug_log_file: Optional[Path] = None


class FileConfig(BaseModel):
    """Everything that can be set in a config file."""
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    safety: SafetyConfig = Field(default_factory=SafetyConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    providers: Dict[str, ProviderSettings] = Field(default_factory=dict)


class RuntimeConfig(BaseModel):
    """File configuration merged with environment and command-line overrides."""
    file: FileConfig = Field(default_factory=FileConfig)
    instruction: str = ""
    model: Optional[str] = None
    provider_name: Optional[str] = None
    num_options: int = Field(MIN_OPTIONS, ge=MIN_OPTIONS, le=MAX_OPTIONS)
    force: bool = False
    dry_run: bool = False
    quiet: bool = False
    verbose: int = 0
    interactive: bool = False
    debug: bool = False
    debug_file: Optional[Path] = None
    color: ColorMode = "auto"
    mock_ai: bool = False

    @property
    def primary_provider(self) -> str:
        return self.provider_name or self.file.provider.default

    @property
    def prompt_timeout_seconds(self) -> Optional[float]:
        timeout = self.file.ui.prompt_timeout
        return timeout / 1000 if timeout > 0 else None

    def provider_settings(self, name: str) -> ProviderSettings:
        return self.file.providers.get(name) or ProviderSettings()

    def api_key_for(self, name: str) -> Optional[str]:
        """
        Resolve the API key for a backend.

        Order: ``api_key`` in the config, then the variable named by
        ``api_key_env``, then ``OPENROUTER_API_KEY``.
        """
        settings = self.provider_settings(name)
        if settings.api_key:
            return settings.api_key
        if settings.api_key_env:
            value = os.getenv(settings.api_key_env)
            if value:
                return value
        return os.getenv(OPENROUTER_API_KEY_ENV) or None


def clamp_options(value: int) -> int:
    """Clamp a requested option count into the supported range."""
    return max(MIN_OPTIONS, min(MAX_OPTIONS, value))


# --- Configuration Manager ---

class ConfigManager:
    """Loads and merges clai configuration."""

    def __init__(self, search_paths: Optional[List[Path]] = None):
        self._search_paths = search_paths

    def config_paths(self) -> List[Path]:
        """Config file candidates, lowest precedence first."""
        if self._search_paths is not None:
            return list(self._search_paths)

        paths = [SYSTEM_CONFIG_FILE, USER_CONFIG_FILE]
        xdg_config = os.getenv("XDG_CONFIG_HOME")
        if xdg_config:
            paths.append(Path(xdg_config) / "clai" / "config.toml")
        paths.append(Path.cwd() / LOCAL_CONFIG_FILE_NAME)
        return paths

    def load_file_config(self) -> FileConfig:
        """Read every existing config file and merge them into one model."""
        merged: Dict[str, Any] = {}
        for path in self.config_paths():
            if not path.is_file():
                continue
            logger.debug(f"Loading configuration from: {path}")
            merged = _merge_dicts(merged, _read_toml(path))

        try:
            return FileConfig(**merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def load(self, **overrides: Any) -> RuntimeConfig:
        """
        Build the runtime configuration.

        Args:
            **overrides: Command-line values; ``None`` means "not given".

        Returns:
            The resolved RuntimeConfig.
        """
        load_dotenv()  # Load .env file if present
        file_config = self.load_file_config()

        values: Dict[str, Any] = {
            "file": file_config,
            "model": os.getenv("CLAI_MODEL") or None,
            "provider_name": os.getenv("CLAI_PROVIDER") or None,
            "interactive": file_config.ui.interactive,
            "color": file_config.ui.color,
            "debug_file": file_config.ui.debug_log_file,
            "mock_ai": os.getenv("MOCK_AI") == "1",
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        if "num_options" in values:
            values["num_options"] = clamp_options(values["num_options"])

        try:
            return RuntimeConfig(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:  # TOML requires binary read mode
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Error decoding TOML configuration file ({path}): {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file ({path}): {e}") from e


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged

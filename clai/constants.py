# clai/constants.py
"""
Constants for the clai application.
"""
from pathlib import Path

# Application information
APP_NAME = "clai"
APP_DESCRIPTION = "AI-powered CLI that converts natural language into executable shell commands"

# Config file locations, lowest precedence first
SYSTEM_CONFIG_FILE = Path("/etc/clai/config.toml")
USER_CONFIG_FILE = Path.home() / ".config" / "clai" / "config.toml"
LOCAL_CONFIG_FILE_NAME = ".clai.toml"

# Logging
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[name]} | {message}"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "7 days"
DEFAULT_DEBUG_LOG_FILE = Path.home() / ".cache" / "clai" / "debug.log"

# API
OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENROUTER_API_KEY_ENV = "OPENROUTER_API_KEY"
DEFAULT_OPENROUTER_MODEL = "qwen/qwen3-coder"
DEFAULT_PROVIDER = "openrouter"
REQUEST_TIMEOUT = 60  # seconds
REQUEST_TEMPERATURE = 0.1
RATE_LIMIT_RETRIES = 3
RATE_LIMIT_BASE_DELAY = 1.0  # seconds, doubled on each retry
MODEL_SEPARATOR = "/"

# Command options
MIN_OPTIONS = 1
MAX_OPTIONS = 10

# Context
MAX_STDIN_BYTES = 10 * 1024
PATH_TRUNCATE_LENGTH = 80
MAX_PROMPT_FILES = 20

# UI
DEFAULT_PROMPT_TIMEOUT_MS = 30000
MAX_PROMPT_TIMEOUT_MS = 300000

# Exit codes
EXIT_SUCCESS = 0
EXIT_GENERAL = 1
EXIT_USAGE = 2
EXIT_CONFIG = 3
EXIT_API = 4
EXIT_SAFETY = 5
EXIT_TIMEOUT = 124
EXIT_PERMISSION_DENIED = 126
EXIT_NOT_FOUND = 127
EXIT_SIGNAL = 128
EXIT_INTERRUPTED = 130

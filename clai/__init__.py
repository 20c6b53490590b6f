# clai/__init__.py
"""
clai: AI-powered CLI that turns natural language into shell commands.
"""
from loguru import logger

__version__ = '0.1.0'

# Stay silent when imported as a library; setup_logging() turns this back on
logger.disable("clai")

# clai/output/__init__.py
"""
Printing and executing the chosen command.
"""
from clai.output.execute import execute_command, validate_command
from clai.output.printer import print_command, print_preview

__all__ = ["execute_command", "validate_command", "print_command", "print_preview"]

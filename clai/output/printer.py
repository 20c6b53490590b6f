# clai/output/printer.py
"""
Writing commands to stdout.

A trailing newline is added only for terminals, so ``$(clai ...)`` and
pipes receive the bare command.
"""
from typing import Sequence, TextIO


def print_command(command: str, stream: TextIO, is_tty: bool) -> None:
    stream.write(command + ("\n" if is_tty else ""))
    stream.flush()


def print_preview(commands: Sequence[str], stream: TextIO, is_tty: bool) -> None:
    """Write every candidate, separated by blank lines."""
    print_command("\n\n".join(commands), stream, is_tty)

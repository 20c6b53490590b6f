# clai/cli.py
"""
Command-line interface for clai.
"""
import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from clai import __version__
from clai.config import ConfigManager, RuntimeConfig, clamp_options
from clai.constants import APP_DESCRIPTION, EXIT_INTERRUPTED
from clai.context.environment import TerminalEnvironment
from clai.errors import (
    AIError,
    ClaiError,
    ConfigError,
    ExecutionError,
    InterruptError,
    UsageError,
    UserAbort,
)
from clai.orchestrator import Orchestrator
from clai.signals import register_signal_handlers
from clai.utils.logging import default_debug_file, get_logger, setup_logging

# Create the app
app = typer.Typer(help=APP_DESCRIPTION, add_completion=False)
logger = get_logger(__name__)

ERROR_LABELS = [
    (UserAbort, "Aborted"),
    (UsageError, "Usage error"),
    (ConfigError, "Configuration error"),
    (AIError, "AI error"),
    (ExecutionError, "Execution error"),
    (InterruptError, "Interrupted"),
]


def version_callback(value: bool):
    """Display version information and exit."""
    if value:
        typer.echo(f"clai {__version__}")
        raise typer.Exit()


def report_error(error: ClaiError, err_console: Console) -> None:
    """Print an error to stderr, labelled by its category."""
    label = next((name for cls, name in ERROR_LABELS if isinstance(error, cls)), "Error")
    style = "yellow" if isinstance(error, UserAbort) else "bold red"
    err_console.print(f"[{style}]{label}:[/{style}] {escape(error.message)}")


async def run_pipeline(orchestrator: Orchestrator, instruction: str) -> int:
    """Run the orchestrator with SIGINT/SIGTERM wired to its interrupt flag."""
    remove_handlers = register_signal_handlers(orchestrator.interrupt, asyncio.current_task())
    try:
        return await orchestrator.run(instruction)
    except asyncio.CancelledError:
        if orchestrator.interrupt.is_set:
            raise InterruptError()
        raise
    finally:
        remove_handlers()


def build_config(**overrides) -> RuntimeConfig:
    return ConfigManager().load(**overrides)


@app.command()
def clai_command(
    instruction: List[str] = typer.Argument(
        ..., help="What you want to do, in plain language."
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Model to use, optionally as <backend>/<model>."
    ),
    provider: Optional[str] = typer.Option(
        None, "--provider", "-p", help="Primary backend (overrides provider.default)."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only report errors."
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="More log output (repeat for debug)."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable colored output."
    ),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Pick among several candidates interactively."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip the confirmation for dangerous commands."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show the candidates without running anything."
    ),
    options: Optional[int] = typer.Option(
        None, "--options", "-o", help="Number of candidates to generate (1-10)."
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Enable debug output, including the full prompt."
    ),
    debug_file: Optional[Path] = typer.Option(
        None, "--debug-file", help="Also write debug logs to this file."
    ),
    version: bool = typer.Option(
        False, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """Convert a natural-language instruction into a shell command."""
    text = " ".join(instruction).strip()
    # Diagnostics go to stderr; stdout carries only the command
    err_console = Console(stderr=True, no_color=no_color)

    try:
        config = build_config(
            instruction=text,
            model=model,
            provider_name=provider,
            num_options=clamp_options(options) if options is not None else None,
            force=force or None,
            dry_run=dry_run or None,
            quiet=quiet or None,
            verbose=verbose or None,
            interactive=interactive or None,
            debug=debug or None,
            debug_file=debug_file,
            color="never" if no_color else None,
        )
    except ClaiError as e:
        report_error(e, err_console)
        raise typer.Exit(code=e.code)

    log_file = config.debug_file or (default_debug_file() if config.debug else None)
    setup_logging(
        quiet=config.quiet,
        verbose=config.verbose,
        debug=config.debug,
        debug_file=log_file,
        colorize=False if config.color == "never" else None,
    )
    logger.debug(f"Runtime configuration: {config.model_dump(exclude={'file'})}")

    env = TerminalEnvironment()
    orchestrator = Orchestrator(config, env, console=err_console)

    try:
        code = asyncio.run(run_pipeline(orchestrator, text))
    except ClaiError as e:
        logger.debug(f"{type(e).__name__}: {e.message}")
        report_error(e, err_console)
        raise typer.Exit(code=e.code)
    except KeyboardInterrupt:
        report_error(InterruptError(), err_console)
        raise typer.Exit(code=EXIT_INTERRUPTED)

    raise typer.Exit(code=code)


def main():
    """Console-script entry point."""
    app(prog_name="clai")


if __name__ == "__main__":
    main()

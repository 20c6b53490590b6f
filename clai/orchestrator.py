# clai/orchestrator.py
"""
Main orchestration for clai.

Coordinates one invocation: gather context, generate candidates, gate them
for safety, let the operator choose, then print or execute the result.
"""
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from clai.ai.chain import BackendChain
from clai.ai.generator import CommandGenerator
from clai.ai.types import CommandSet
from clai.config import RuntimeConfig
from clai.constants import EXIT_SUCCESS
from clai.context.environment import TerminalEnvironment
from clai.context.gatherer import gather_context
from clai.errors import EmptyInstructionError, UserAbort
from clai.output.execute import execute_command
from clai.output.printer import print_command, print_preview
from clai.safety.confirmation import confirm_dangerous_command
from clai.safety.gate import SafetyGate
from clai.safety.patterns import PatternMatcher
from clai.signals import InterruptFlag
from clai.ui.session import SelectionOutcome, SelectionSession
from clai.ui.terminal import run_cycle_session
from clai.utils.logging import get_logger

logger = get_logger(__name__)

Confirmer = Callable[..., Awaitable[SelectionOutcome]]
CycleRunner = Callable[..., Awaitable[SelectionOutcome]]
Executor = Callable[[str], Awaitable[int]]


class Disposition(str, Enum):
    PREVIEW = "preview"   # dry run: show every candidate
    EMIT = "emit"         # print the command for the caller
    RUN = "run"           # execute the selected command
    REFUSED = "refused"   # the operator aborted


@dataclass(frozen=True)
class Resolution:
    disposition: Disposition
    commands: Tuple[str, ...] = ()
    is_dangerous: bool = False
    warn: bool = False

    @property
    def command(self) -> Optional[str]:
        return self.commands[0] if self.commands else None


class Orchestrator:
    """Runs the clai pipeline for one invocation."""

    def __init__(
        self,
        config: RuntimeConfig,
        env: TerminalEnvironment,
        generator: Optional[CommandGenerator] = None,
        gate: Optional[SafetyGate] = None,
        interrupt: Optional[InterruptFlag] = None,
        console: Optional[Console] = None,
        confirmer: Confirmer = confirm_dangerous_command,
        cycle_runner: CycleRunner = run_cycle_session,
        executor: Executor = execute_command,
    ):
        self.config = config
        self.env = env
        self.generator = generator or CommandGenerator(BackendChain.from_config(config), config)
        self.gate = gate or SafetyGate(
            PatternMatcher(config.file.safety.dangerous_patterns),
            env,
            confirm_dangerous=config.file.safety.confirm_dangerous,
            force=config.force,
        )
        self.interrupt = interrupt or InterruptFlag()
        self.console = console or Console(stderr=True, no_color=config.color == "never")
        self._confirmer = confirmer
        self._cycle_runner = cycle_runner
        self._executor = executor

    async def resolve(self, command_set: CommandSet) -> Resolution:
        """
        Decide what happens to a generated command set.

        Args:
            command_set: The generated candidates.

        Returns:
            A Resolution; REFUSED when the operator aborted.
        """
        verdict = self.gate.evaluate(command_set)

        if self.config.dry_run:
            return Resolution(Disposition.PREVIEW, tuple(command_set.commands), verdict.is_dangerous)

        self.interrupt.check()
        timeout = self.config.prompt_timeout_seconds

        if verdict.should_prompt:
            outcome = await self._confirmer(command_set.primary, timeout=timeout, console=self.console)
            if not outcome.proceeds:
                return Resolution(Disposition.REFUSED, (command_set.primary,), True)
            # Execute and Output both hand the command back to the caller
            return Resolution(Disposition.EMIT, (command_set.primary,), True)

        if self.config.interactive and self.env.is_interactive and len(command_set) > 1:
            return await self._cycle(command_set, verdict.is_dangerous, timeout)

        return Resolution(
            Disposition.EMIT,
            (command_set.primary,),
            is_dangerous=verdict.is_dangerous,
            warn=verdict.is_dangerous,
        )

    async def _cycle(self, command_set: CommandSet, is_dangerous: bool, timeout: Optional[float]) -> Resolution:
        session = SelectionSession(command_set, is_dangerous=is_dangerous)
        outcome = session.start(interactive=True)
        if outcome is None:
            outcome = await self._cycle_runner(session, timeout=timeout)

        if not outcome.proceeds:
            return Resolution(Disposition.REFUSED, (outcome.command,), is_dangerous)

        # Only the primary candidate was gated; check the one actually chosen
        selected = self.gate.check(outcome.command)
        if selected.should_prompt and outcome.index != 0:
            self.interrupt.check()
            confirmed = await self._confirmer(outcome.command, timeout=timeout, console=self.console)
            if not confirmed.proceeds:
                return Resolution(Disposition.REFUSED, (outcome.command,), True)

        return Resolution(
            Disposition.RUN,
            (outcome.command,),
            is_dangerous=selected.is_dangerous,
            warn=selected.needs_warning,
        )

    async def deliver(self, resolution: Resolution) -> int:
        """
        Print or execute a resolution.

        Returns:
            The exit code for the process.

        Raises:
            UserAbort: If the resolution is a refusal.
        """
        if resolution.disposition == Disposition.REFUSED:
            raise UserAbort()

        if resolution.disposition == Disposition.PREVIEW:
            print_preview(resolution.commands, self.env.stdout, self.env.stdout_is_tty)
            return EXIT_SUCCESS

        # Shown even with --quiet
        if resolution.warn:
            self.console.print(f"[bold yellow]⚠️  Warning: dangerous command:[/bold yellow] {escape(resolution.command)}")

        if resolution.disposition == Disposition.RUN:
            return await self._executor(resolution.command)

        print_command(resolution.command, self.env.stdout, self.env.stdout_is_tty)
        return EXIT_SUCCESS

    def _generating(self):
        """Spinner on stderr while waiting for the backend, when stderr is a terminal."""
        if self.env.stderr_is_tty and not self.config.quiet:
            return self.console.status("Generating command...", spinner="dots")
        return nullcontext()

    async def run(self, instruction: str) -> int:
        """
        Run the whole pipeline for one instruction.

        Returns:
            The process exit code.

        Raises:
            ClaiError: Any typed failure; UserAbort when the operator refused.
        """
        if not instruction or not instruction.strip():
            raise EmptyInstructionError()

        self.interrupt.check()
        context = gather_context(self.config, self.env)
        logger.debug(f"Context: {context.model_dump()}")

        self.interrupt.check()
        with self._generating():
            command_set = await self.generator.generate(context, instruction)

        self.interrupt.check()
        resolution = await self.resolve(command_set)
        logger.info(f"Resolution: {resolution.disposition.value} {resolution.commands}")

        self.interrupt.check()
        return await self.deliver(resolution)

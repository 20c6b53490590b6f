# clai/ai/generator.py
"""
Command generation: prompt, backend chain and extraction in one call.
"""
from typing import TYPE_CHECKING

from clai.ai.parser import extract_commands
from clai.ai.prompts import build_messages
from clai.ai.types import ChatRequest, CommandSet
from clai.constants import REQUEST_TEMPERATURE
from clai.context.models import ContextBundle
from clai.errors import EmptyInstructionError
from clai.utils.logging import get_logger

if TYPE_CHECKING:
    from clai.ai.chain import BackendChain
    from clai.config import RuntimeConfig

logger = get_logger(__name__)


class CommandGenerator:
    """Turns an instruction and its context into a CommandSet."""

    def __init__(self, chain: "BackendChain", config: "RuntimeConfig"):
        self._chain = chain
        self._config = config

    def build_request(self, context: ContextBundle, instruction: str) -> ChatRequest:
        messages = build_messages(context, instruction, self._config.num_options)
        return ChatRequest(
            model=self._config.model,
            messages=messages,
            temperature=REQUEST_TEMPERATURE,
        )

    async def generate(self, context: ContextBundle, instruction: str) -> CommandSet:
        """
        Generate command candidates.

        Args:
            context: The gathered context bundle.
            instruction: The natural-language instruction.

        Returns:
            A CommandSet of at most MAX_OPTIONS candidates.

        Raises:
            EmptyInstructionError: If the instruction is blank.
            AIError: If every backend failed or nothing could be extracted.
        """
        instruction = (instruction or "").strip()
        if not instruction:
            raise EmptyInstructionError()

        request = self.build_request(context, instruction)
        if self._config.debug:
            for message in request.messages:
                logger.debug(f"Prompt [{message.role}]:\n{message.content}")

        response = await self._chain.complete(request)
        logger.debug(f"Raw AI response: {response.content!r}")

        commands = extract_commands(response.content, self._config.num_options > 1)
        command_set = CommandSet.from_candidates(commands)

        logger.info(f"Generated {len(command_set)} command(s)")
        return command_set

# clai/ai/prompts.py
"""
Prompt construction for command generation.

The system message frames the task (one command, or a JSON list of several);
the user message carries the gathered context and the instruction itself.
"""
from typing import List

from clai.ai.types import ChatMessage
from clai.constants import MAX_PROMPT_FILES
from clai.context.models import ContextBundle

# Base system instructions
SYSTEM_INSTRUCTIONS = (
    "You are a helpful assistant that converts natural language instructions "
    "into executable shell commands."
)

SINGLE_COMMAND_SYSTEM_PROMPT = (
    f"{SYSTEM_INSTRUCTIONS} Respond with ONLY the command, no explanations or markdown."
)

MULTI_COMMAND_SYSTEM_PROMPT = (
    f"{SYSTEM_INSTRUCTIONS} Generate exactly {{num_options}} different command options. "
    'Respond ONLY with a JSON object in this format: {{"commands": ["cmd1", "cmd2", ...]}}. '
    "No markdown, no explanations."
)

SINGLE_COMMAND_CLOSING = (
    "Respond ONLY with the executable command. Do not include markdown code fences, "
    "explanations, or any other text. Just the command itself."
)

MULTI_COMMAND_CLOSING = (
    'Respond with exactly {num_options} different command options as JSON: '
    '{{"commands": ["cmd1", "cmd2", ...]}}. Order from simplest to most advanced. '
    "No markdown or explanations."
)


def build_system_prompt(num_options: int) -> str:
    if num_options > 1:
        return MULTI_COMMAND_SYSTEM_PROMPT.format(num_options=num_options)
    return SINGLE_COMMAND_SYSTEM_PROMPT


def build_user_prompt(context: ContextBundle, instruction: str, num_options: int) -> str:
    """
    Build the user message from the gathered context.

    Args:
        context: The gathered context bundle.
        instruction: The trimmed natural-language instruction.
        num_options: How many command candidates to ask for.

    Returns:
        The user message text.
    """
    system = context.system
    memory = f"{system.total_memory_mb} MB" if system.total_memory_mb is not None else "unknown"
    os_line = f"{system.os_name} {system.os_version}".strip()
    sections = [
        "System Context:\n"
        f"OS: {os_line}\n"
        f"Architecture: {system.architecture or 'unknown'}\n"
        f"Shell: {system.shell}\n"
        f"User: {system.user}\n"
        f"Memory: {memory}"
    ]

    files = ", ".join(context.files[:MAX_PROMPT_FILES]) if context.files else "(empty directory)"
    sections.append(
        "Directory Context:\n"
        f"Current directory: {context.cwd}\n"
        f"Files: {files}"
    )

    if context.history:
        history = "\n".join(f"{i}. {line}" for i, line in enumerate(context.history, start=1))
        sections.append(f"Recent Shell History:\n{history}")

    if context.stdin:
        sections.append(f"Stdin input:\n{context.stdin}")

    sections.append(f"User Instruction: {instruction}")

    if num_options > 1:
        sections.append(MULTI_COMMAND_CLOSING.format(num_options=num_options))
    else:
        sections.append(SINGLE_COMMAND_CLOSING)

    return "\n\n".join(sections)


def build_messages(context: ContextBundle, instruction: str, num_options: int) -> List[ChatMessage]:
    """System and user messages for one generation request."""
    return [
        ChatMessage(role="system", content=build_system_prompt(num_options)),
        ChatMessage(role="user", content=build_user_prompt(context, instruction, num_options)),
    ]

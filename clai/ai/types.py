# clai/ai/types.py
"""
Request, response and command-set models shared by the AI layer.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clai.constants import MAX_OPTIONS

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ChatRequest(BaseModel):
    """A chat-completion request, independent of any backend."""
    model_config = ConfigDict(frozen=True)

    messages: List[ChatMessage]
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    def with_model(self, model: Optional[str]) -> "ChatRequest":
        return self.model_copy(update={"model": model})


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatResponse(BaseModel):
    content: str
    model: Optional[str] = None
    usage: Optional[Usage] = None


class CommandSet(BaseModel):
    """
    Ordered command candidates, the first being the primary one.

    Holds between one and MAX_OPTIONS trimmed, non-empty commands.
    """
    model_config = ConfigDict(frozen=True)

    commands: List[str] = Field(..., min_length=1, max_length=MAX_OPTIONS)

    @field_validator("commands")
    @classmethod
    def _strip_commands(cls, commands: List[str]) -> List[str]:
        cleaned = [c.strip() for c in commands]
        if any(not c for c in cleaned):
            raise ValueError("commands must not be blank")
        return cleaned

    @classmethod
    def from_candidates(cls, candidates: List[str]) -> "CommandSet":
        """Build a set from extracted candidates, dropping blanks and keeping the first MAX_OPTIONS."""
        cleaned = [c.strip() for c in candidates if c and c.strip()]
        return cls(commands=cleaned[:MAX_OPTIONS])

    @property
    def primary(self) -> str:
        return self.commands[0]

    def __len__(self) -> int:
        return len(self.commands)

    def __getitem__(self, index: int) -> str:
        return self.commands[index]

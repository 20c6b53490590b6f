# clai/context/models.py
"""
Data models for the context sent along with an instruction.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class SystemInfo(BaseModel):
    """Facts about the machine the command will run on."""
    os_name: str
    os_version: str = ""
    architecture: str = ""
    shell: str = "sh"
    user: str = ""
    total_memory_mb: Optional[int] = None


class ContextBundle(BaseModel):
    """Everything the backend is told about the caller's environment."""
    system: SystemInfo
    cwd: str
    files: List[str] = Field(default_factory=list)
    history: List[str] = Field(default_factory=list)
    stdin: Optional[str] = None

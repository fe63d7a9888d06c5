"""Hash Command Schemas — request/response models for the hash command API.

Invariants:
    - HashRequest.hash reaches the parser byte-for-byte; only its length
      is bounded (settings.hash_max_length)
    - Response models mirror HashCommand.to_dict() field for field
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from hash_commands.config import get_settings
from hash_commands.core.hash_command import HashCommand


class HashRequest(BaseModel):
    """A raw URL fragment, with or without the leading '#'."""
    hash: str = Field(default="")

    @field_validator("hash")
    @classmethod
    def check_length(cls, v: str) -> str:
        limit = get_settings().hash_max_length
        if len(v) > limit:
            raise ValueError(f"hash longer than {limit} characters")
        return v


class HashCommandResponse(BaseModel):
    method: str
    command: str
    args: dict[str, Any]

    @classmethod
    def from_command(cls, hash_command: HashCommand) -> "HashCommandResponse":
        return cls(**hash_command.to_dict())


class CommandListResponse(BaseModel):
    commands: list[HashCommandResponse]

    @classmethod
    def from_commands(cls, commands) -> "CommandListResponse":
        return cls(commands=[HashCommandResponse.from_command(c) for c in commands])


class RunResponse(BaseModel):
    status: Literal["ok"] = "ok"
    executed: int

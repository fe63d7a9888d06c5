"""Hash Command — immutable value type for one parsed fragment token.

Invariants:
    - method is always "<namespace>:<qualifier>" (exactly one colon)
    - args is read-only once constructed (MappingProxyType over a private copy)
    - A HashCommand carries no reference to the dispatcher that will run it

Design Decisions:
    - Frozen dataclass over Pydantic model: core/ stays free of IO-layer deps
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, TypeAlias

JSONValue: TypeAlias = (
    None | bool | int | float | str | list["JSONValue"] | dict[str, "JSONValue"]
)
CommandArgs: TypeAlias = Mapping[str, JSONValue]


@dataclass(frozen=True, eq=True)
class HashCommand:
    """One (method, command, args) triple extracted from a hash token."""

    method: str
    command: str
    args: CommandArgs = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "command": self.command,
            "args": dict(self.args),
        }

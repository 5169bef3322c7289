"""Interpreter settings.

Validated with pydantic; ``Config.from_env()`` applies ``PIPESCRIPT_*``
environment overrides on top of the defaults.
"""

from __future__ import annotations
import os
from typing import Any, Dict, FrozenSet, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BLOCK_COMMANDS: FrozenSet[str] = frozenset({"foreach", "function", "if", "elif", "else"})
CHAIN_COMMANDS: FrozenSet[str] = frozenset({"if", "elif"})
CONTINUATION_COMMANDS: FrozenSet[str] = frozenset({"elif", "else"})


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    unknown_escape: Literal["error", "keep", "drop"] = Field(
        default="error", description="How a string literal treats an unrecognised backslash escape"
    )
    strict_variables: bool = Field(default=False, description="Raise on undefined variables instead of yielding nil")
    terminator: str = Field(default="end", min_length=1)
    block_commands: FrozenSet[str] = Field(default=DEFAULT_BLOCK_COMMANDS)
    max_depth: int = Field(default=200, ge=1, description="Deepest allowed block nesting")
    max_call_depth: int = Field(default=100, ge=1, description="Deepest allowed chain of nested `call`s")

    @field_validator("terminator", mode="before")
    @classmethod
    def lower_terminator(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("block_commands", mode="before")
    @classmethod
    def coerce_block_commands(cls, v: Any) -> Any:
        """Accept any iterable of names and normalize to a lower-case frozenset."""
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, set, tuple, frozenset)):
            return frozenset(str(x).strip().lower() for x in v if str(x).strip())
        return v

    def with_block_commands(self, extra) -> "Config":
        return self.model_copy(update={"block_commands": frozenset(self.block_commands) | frozenset(extra)})

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        data: Dict[str, Any] = {}
        if os.getenv("PIPESCRIPT_UNKNOWN_ESCAPE"):
            data["unknown_escape"] = os.getenv("PIPESCRIPT_UNKNOWN_ESCAPE").lower()
        if os.getenv("PIPESCRIPT_STRICT_VARIABLES"):
            data["strict_variables"] = os.getenv("PIPESCRIPT_STRICT_VARIABLES")
        if os.getenv("PIPESCRIPT_MAX_DEPTH"):
            data["max_depth"] = os.getenv("PIPESCRIPT_MAX_DEPTH")
        if os.getenv("PIPESCRIPT_MAX_CALL_DEPTH"):
            data["max_call_depth"] = os.getenv("PIPESCRIPT_MAX_CALL_DEPTH")
        data.update(overrides)
        return cls.model_validate(data)

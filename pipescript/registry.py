"""Name-keyed command table.

A handler is called as ``handler(value, args, line, env, children)`` and
returns the new current value. ``args`` are the statement's unevaluated
expression trees; ``children`` is the block body for block commands and
``None`` otherwise. Handlers may mutate ``env`` but must not keep ``args`` or
``children`` past the call.
"""
from __future__ import annotations
import inspect
import re
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Sequence

from .errors import CommandLookupError, RegistrationError

if TYPE_CHECKING:
    from .ast import ExpressionNode, StatementNode
    from .environment import Environment

Handler = Callable[
    [Any, "Sequence[ExpressionNode]", int, "Environment", "Optional[List[StatementNode]]"], Any
]

COMMAND_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


class CommandRegistry:
    def __init__(self):
        self._handlers: Dict[str, Handler] = {}
        self._blocks: set = set()

    def register(self, name: str, handler: Optional[Handler] = None, *, block: bool = False):
        """Register ``handler`` under ``name``; usable directly or as a decorator."""
        if handler is None:
            def decorator(fn: Handler) -> Handler:
                self.register(name, fn, block=block)
                return fn
            return decorator
        name = name.lower()
        self._validate(name, handler)
        self._handlers[name] = handler
        if block:
            self._blocks.add(name)
        else:
            self._blocks.discard(name)
        return handler

    @staticmethod
    def _validate(name: str, handler: Any) -> None:
        if not COMMAND_NAME.match(name):
            raise RegistrationError(f"Invalid command name {name!r}")
        if not callable(handler):
            raise RegistrationError(f"Handler for '{name}' is not callable")
        try:
            inspect.signature(handler).bind(None, (), 0, None, None)
        except TypeError as e:
            raise RegistrationError(
                f"Handler for '{name}' must accept (value, args, line, env, children): {e}"
            ) from e
        except ValueError:
            # builtins without an introspectable signature
            pass

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)
        self._blocks.discard(name)

    def lookup(self, name: str, line: Optional[int] = None) -> Handler:
        handler = self._handlers.get(name)
        if handler is None:
            raise CommandLookupError(f"Command `{name}` not found", line)
        return handler

    def get(self, name: str) -> Optional[Handler]:
        return self._handlers.get(name)

    @property
    def block_commands(self) -> FrozenSet[str]:
        return frozenset(self._blocks)

    def copy(self) -> "CommandRegistry":
        other = CommandRegistry()
        other._handlers = dict(self._handlers)
        other._blocks = set(self._blocks)
        return other

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._handlers))

    def __len__(self) -> int:
        return len(self._handlers)

from __future__ import annotations
import sys
from contextlib import contextmanager
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, TextIO

from .ast import StatementNode
from .config import Config
from .registry import CommandRegistry


@dataclass
class Environment:
    """Mutable state shared by every statement of one run.

    Variables are global to the run. ``registry`` resolves command names,
    ``counts`` tallies executed statements per command and ``functions``
    holds bodies recorded by ``function`` blocks. ``call_depth`` is the
    number of ``call``s currently running. Each executed statement sequence
    gets a frame that remembers whether its current if/elif chain already
    took a branch.
    """
    variables: Dict[str, Any] = field(default_factory=dict)
    config: Config = field(default_factory=Config)
    stdout: Optional[TextIO] = None
    registry: CommandRegistry = field(default_factory=CommandRegistry)
    counts: Counter = field(default_factory=Counter)
    functions: Dict[str, List[StatementNode]] = field(default_factory=dict)
    call_depth: int = 0
    _frames: List[Optional[bool]] = field(default_factory=list, repr=False)

    def __contains__(self, name: str) -> bool:
        return name in self.variables

    def __getitem__(self, name: str) -> Any:
        return self.variables[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self.variables.get(name, default)

    @property
    def out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    @contextmanager
    def frame(self) -> Iterator[None]:
        self._frames.append(None)
        try:
            yield
        finally:
            self._frames.pop()

    # None: no open chain, False: open and nothing taken yet, True: a branch ran
    @property
    def chain_taken(self) -> Optional[bool]:
        return self._frames[-1] if self._frames else None

    @chain_taken.setter
    def chain_taken(self, state: Optional[bool]) -> None:
        if self._frames:
            self._frames[-1] = state

    @property
    def depth(self) -> int:
        return len(self._frames)

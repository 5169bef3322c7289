from __future__ import annotations
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from loguru import logger

from .ast import StatementNode
from .commands import standard_registry
from .config import Config
from .environment import Environment
from .errors import PipeScriptError
from .executor import execute, tracer
from .parser import parse
from .registry import CommandRegistry


class Runtime:
    def __init__(self, config: Optional[Config] = None, registry: Optional[CommandRegistry] = None,
                 stdout: Optional[TextIO] = None):
        self.registry = registry if registry is not None else standard_registry()
        # commands registered as blocks open bodies in the parser too
        self.config = (config or Config()).with_block_commands(self.registry.block_commands)
        self.stdout = stdout
        self.program: Optional[List[StatementNode]] = None
        self.env: Optional[Environment] = None
        self.metrics: Dict[str, Any] = {"statements": 0, "commands": {}, "run_ms": 0.0}

    def load(self, source: str | Path) -> List[StatementNode]:
        self.program = parse(source, self.config)
        return self.program

    def new_environment(self) -> Environment:
        return Environment(config=self.config, stdout=self.stdout, registry=self.registry)

    # ---------- Execution entry ----------
    def run(self, source: str | Path | None = None) -> Any:
        """Run ``source`` (or the loaded program) in a fresh environment; return the final value."""
        if source is not None:
            self.load(source)
        if self.program is None:
            raise PipeScriptError("No program loaded")
        env = self.new_environment()
        self.env = env
        logger.info("run start: {} top-level statements", len(self.program))
        t0 = time.perf_counter()
        try:
            with tracer.start_as_current_span("pipescript.run"):
                value = execute(self.program, None, env)
        except PipeScriptError as e:
            logger.error("run aborted: {}", e)
            raise
        finally:
            self._record(env, t0)
        logger.info("run done in {:.2f} ms", self.metrics["run_ms"])
        return value

    def _record(self, env: Environment, t0: float) -> None:
        self.metrics["run_ms"] = (time.perf_counter() - t0) * 1000.0
        self.metrics["commands"] = dict(env.counts)
        self.metrics["statements"] = sum(env.counts.values())


def run(source: str | Path, config: Optional[Config] = None, stdout: Optional[TextIO] = None) -> Any:
    return Runtime(config=config, stdout=stdout).run(source)

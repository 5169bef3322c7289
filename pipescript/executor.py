from __future__ import annotations
from typing import Any, Optional, Sequence

from loguru import logger
from opentelemetry import trace

from .ast import StatementNode
from .config import CHAIN_COMMANDS
from .environment import Environment

tracer = trace.get_tracer(__name__)


def execute(nodes: Sequence[StatementNode], value: Any = None, env: Optional[Environment] = None) -> Any:
    """Fold ``value`` through ``nodes`` in order and return the final value.

    Block commands receive their body as ``children`` and call back into this
    function to run it.
    """
    if env is None:
        env = Environment()
    with env.frame():
        for node in nodes:
            stmt = node.statement
            handler = env.registry.lookup(stmt.command, stmt.line)
            logger.debug("line {}: {} ({} args)", stmt.line, stmt.command, len(stmt.args))
            env.counts[stmt.command] += 1
            if node.children is not None:
                with tracer.start_as_current_span(f"block:{stmt.command}") as span:
                    span.set_attribute("pipescript.line", stmt.line)
                    value = handler(value, stmt.args, stmt.line, env, node.children)
            else:
                value = handler(value, stmt.args, stmt.line, env, None)
            if stmt.command not in CHAIN_COMMANDS:
                env.chain_taken = None
    return value

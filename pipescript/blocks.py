from typing import List, Optional, Sequence, Tuple

from loguru import logger

from .ast import Statement, StatementNode
from .config import CHAIN_COMMANDS, CONTINUATION_COMMANDS, Config
from .errors import ParseError

_DEFAULT_CONFIG = Config()


def build_tree(statements: Sequence[Statement], index: int = 0, in_chain: bool = False,
               config: Optional[Config] = None, depth: int = 0) -> Tuple[List[StatementNode], int]:
    """Group flat statements into nested block bodies.

    Returns the nodes built and the index where scanning stopped: the
    terminator's index when one closed the body, the index just before an
    ``elif``/``else`` when ``in_chain`` is set, or ``len(statements)``.
    """
    nodes, stop, _ = _build(statements, index, in_chain, config or _DEFAULT_CONFIG, depth)
    return nodes, stop


def _build(statements, index, in_chain, config, depth) -> Tuple[List[StatementNode], int, bool]:
    # third item: True when the body stopped in front of an elif/else
    nodes: List[StatementNode] = []
    chain_open = False
    i = index
    while i < len(statements):
        stmt = statements[i]
        if in_chain and stmt.command in CONTINUATION_COMMANDS and not chain_open:
            # belongs to the enclosing chain: the caller picks it up as the next sibling
            return nodes, i - 1, True
        if stmt.command == config.terminator:
            return nodes, i, False
        if stmt.command in config.block_commands:
            if stmt.command in CONTINUATION_COMMANDS and not chain_open:
                raise ParseError(f"'{stmt.command}' without a preceding 'if' or 'elif'", stmt.line)
            if depth >= config.max_depth:
                raise ParseError(f"Blocks nested deeper than {config.max_depth} levels", stmt.line)
            body, i, continued = _build(statements, i + 1, stmt.command in CHAIN_COMMANDS, config, depth + 1)
            if i >= len(statements):
                raise ParseError(f"Block '{stmt.command}' is never closed with '{config.terminator}'", stmt.line)
            nodes.append(StatementNode(stmt, body))
            chain_open = continued
        else:
            nodes.append(StatementNode(stmt))
            chain_open = False
        i += 1
    return nodes, len(statements), False


def build_program(statements: Sequence[Statement], config: Optional[Config] = None) -> List[StatementNode]:
    config = config or _DEFAULT_CONFIG
    nodes, stop = build_tree(statements, 0, False, config)
    if stop < len(statements):
        raise ParseError(f"Unexpected '{config.terminator}' outside of a block", statements[stop].line)
    logger.debug("built {} top-level statements from {} lines", len(nodes), len(statements))
    return nodes

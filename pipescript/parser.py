from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .ast import ExpressionNode, Statement, StatementNode, Token, TokenKind
from .blocks import build_program
from .config import Config
from .errors import LexError, ParseError
from .lexer import split_args, split_line, tokenize

# lower number binds tighter
PRECEDENCE = {
    "*": 1, "/": 1,
    "+": 2, "-": 2,
    "&": 3,
    "|": 4,
    "^": 5,
}


def precedence(operator: str) -> int:
    return PRECEDENCE[operator]


def to_prefix(tokens: Sequence[Token], line: Optional[int] = None, argnum: Optional[int] = None) -> List[Token]:
    """Reorder infix tokens into operator-first order, dropping parentheses.

    Runs the operator-stack pass from right to left, so ``)`` opens a group
    and ``(`` closes it. A stacked operator is only popped by an incoming one
    that binds strictly looser; equal precedence stays stacked, which keeps
    chains like ``1-2-3`` left-associative once the output is reversed.
    """
    stack: List[Token] = []
    output: List[Token] = []
    for token in reversed(tokens):
        if token.kind != TokenKind.Operator:
            output.append(token)
        elif token.value == ")":
            stack.append(token)
        elif token.value == "(":
            while stack and stack[-1].value != ")":
                output.append(stack.pop())
            if not stack:
                raise ParseError(") expected", line, argnum)
            stack.pop()
        else:
            prec = precedence(token.value)
            while stack and stack[-1].value != ")" and precedence(stack[-1].value) < prec:
                output.append(stack.pop())
            stack.append(token)
    while stack:
        token = stack.pop()
        if token.value == ")":
            raise ParseError("( expected", line, argnum)
        output.append(token)
    output.reverse()
    return output


def _assemble(queue: Sequence[Token], index: int, line, argnum) -> Tuple[ExpressionNode, int]:
    if index >= len(queue):
        raise ParseError("Missing operand", line, argnum)
    token = queue[index]
    if token.kind != TokenKind.Operator:
        return ExpressionNode(token), index + 1
    left, index = _assemble(queue, index + 1, line, argnum)
    right, index = _assemble(queue, index, line, argnum)
    return ExpressionNode(token, left, right), index


def parse_tokens(tokens: Sequence[Token], line: Optional[int] = None, argnum: Optional[int] = None) -> ExpressionNode:
    queue = to_prefix(tokens, line, argnum)
    if not queue:
        raise ParseError("Empty expression", line, argnum)
    node, used = _assemble(queue, 0, line, argnum)
    if used < len(queue):
        raise ParseError(f"Unexpected {queue[used].kind.value} {queue[used].value!r}", line, argnum)
    return node


def parse_expression(text: str, line: Optional[int] = None, argnum: Optional[int] = None,
                     config: Optional[Config] = None) -> ExpressionNode:
    config = config or Config()
    return parse_tokens(tokenize(text, line, argnum, config.unknown_escape), line, argnum)


def parse_lines(lines: Iterable[str], config: Optional[Config] = None) -> List[Statement]:
    """Turn source lines into statements, skipping blanks and ``#`` comments."""
    config = config or Config()
    out: List[Statement] = []
    for index, raw in enumerate(lines):
        text = raw.strip()
        if not text or text.startswith("#"):
            continue
        line = index + 1
        command, rest = split_line(text)
        args: List[ExpressionNode] = []
        for argnum, arg in enumerate(split_args(rest, line)):
            if not arg:
                raise ParseError("Empty argument", line, argnum)
            args.append(parse_expression(arg, line, argnum, config))
        out.append(Statement(line, command, tuple(args)))
    return out


def read_source(source: str | Path) -> str:
    if isinstance(source, Path):
        data = source.read_bytes()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            line = data[:e.start].count(b"\n") + 1
            raise LexError(f"{source} is not valid UTF-8 at byte {e.start}", line) from None
    return str(source)


def parse(source: str | Path, config: Optional[Config] = None) -> List[StatementNode]:
    """Parse program text (or a file given as a ``Path``) into a statement tree."""
    config = config or Config()
    statements = parse_lines(read_source(source).split("\n"), config)
    logger.debug("parsed {} statements", len(statements))
    return build_program(statements, config)

"""Line splitting and argument tokenization.

A statement line is ``<command> <arg>, <arg>, ...``. ``split_line`` separates
the command from the argument text, ``split_args`` cuts the argument text at
top-level commas, and ``tokenize`` turns one argument into tokens.
"""
from __future__ import annotations
import re
from typing import List, Optional, Tuple

from .ast import Token, TokenKind
from .errors import LexError

NAME_CHARS = re.compile(r"[A-Za-z0-9_]")
OPERATORS = frozenset("+-/*()|&^")
ESCAPES = {'"': '"', "n": "\n", "t": "\t", "\\": "\\"}


def split_line(text: str) -> Tuple[str, str]:
    """Return ``(command, argument_text)``; the command is lower-cased."""
    parts = text.strip().split(None, 1)
    if not parts:
        return "", ""
    command = parts[0].lower()
    rest = parts[1] if len(parts) > 1 else ""
    return command, rest


def _closing_quote(text: str, start: int, line: Optional[int], argnum: Optional[int] = None) -> int:
    # start points at the opening quote; a backslash always swallows the next character
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i
        i += 1
    raise LexError("Unterminated string literal", line, argnum)


def split_args(text: str, line: Optional[int] = None) -> List[str]:
    """Split argument text at commas outside quotes and parentheses.

    Returned arguments are stripped; an input of only whitespace yields no
    arguments at all.
    """
    if not text.strip():
        return []
    out: List[str] = []
    curr: List[str] = []
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == '"':
            end = _closing_quote(text, i, line)
            curr.append(text[i:end + 1])
            i = end + 1
            continue
        if ch == "(":
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
        elif ch == "," and depth == 0:
            out.append("".join(curr).strip())
            curr = []
            i += 1
            continue
        curr.append(ch)
        i += 1
    if depth > 0:
        raise LexError("Unterminated parenthesis", line)
    out.append("".join(curr).strip())
    return out


def tokenize(arg: str, line: Optional[int] = None, argnum: Optional[int] = None,
             unknown_escape: str = "error") -> List[Token]:
    tokens: List[Token] = []
    i = 0
    n = len(arg)
    while i < n:
        ch = arg[i]
        if ch.isspace():
            i += 1
        elif ch == '"':
            value, i = _read_string(arg, i, line, argnum, unknown_escape)
            tokens.append(Token(value, TokenKind.String))
        elif ch == "$":
            j = i + 1
            while j < n and NAME_CHARS.match(arg[j]):
                j += 1
            if j == i + 1:
                raise LexError("Expected a variable name after $", line, argnum)
            tokens.append(Token(arg[i + 1:j], TokenKind.Variable))
            i = j
        elif "0" <= ch <= "9":
            j = i + 1
            while j < n and "0" <= arg[j] <= "9":
                j += 1
            tokens.append(Token(arg[i:j], TokenKind.Number))
            i = j
        elif ch in OPERATORS:
            tokens.append(Token(ch, TokenKind.Operator))
            i += 1
        else:
            raise LexError(f"Unexpected character {ch!r}", line, argnum)
    return tokens


def _read_string(arg: str, start: int, line, argnum, unknown_escape: str) -> Tuple[str, int]:
    """Read a quoted literal starting at ``start``; return its value and the index after it."""
    chars: List[str] = []
    i = start + 1
    while i < len(arg):
        ch = arg[i]
        if ch == '"':
            return "".join(chars), i + 1
        if ch != "\\":
            chars.append(ch)
            i += 1
            continue
        if i + 1 >= len(arg):
            break
        nxt = arg[i + 1]
        if nxt in ESCAPES:
            chars.append(ESCAPES[nxt])
        elif unknown_escape == "keep":
            chars.append("\\" + nxt)
        elif unknown_escape == "error":
            raise LexError(f"Unknown escape sequence \\{nxt}", line, argnum)
        i += 2
    raise LexError("Unterminated string literal", line, argnum)


def format_literal(value) -> str:
    """Render an int or str as source text that evaluates back to ``value``.

    Negative numbers have no literal form and come out as ``(0-n)``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"no literal form for {value!r}")
    if isinstance(value, int):
        return str(value) if value >= 0 else f"(0-{-value})"
    escaped = (value.replace("\\", "\\\\").replace('"', '\\"')
               .replace("\n", "\\n").replace("\t", "\\t"))
    return f'"{escaped}"'

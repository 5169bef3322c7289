# Token, expression and statement tree types for PipeScript
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class TokenKind(str, Enum):
    Variable = "variable"
    Number = "number"
    String = "string"
    Operator = "operator"

@dataclass(frozen=True)
class Token:
    value: str
    kind: TokenKind

    def __repr__(self):
        return f"{self.kind.value}({self.value!r})"

@dataclass(frozen=True)
class ExpressionNode:
    """One node of an argument's expression tree.

    Operator nodes always own both children; every other kind is a leaf.
    """
    token: Token
    left: Optional["ExpressionNode"] = None
    right: Optional["ExpressionNode"] = None

    @property
    def is_operator(self) -> bool:
        return self.token.kind == TokenKind.Operator

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"kind": self.token.kind.value, "value": self.token.value}
        if self.is_operator:
            d["left"] = self.left.to_dict()
            d["right"] = self.right.to_dict()
        return d

@dataclass(frozen=True)
class Statement:
    line: int
    command: str
    args: Tuple[ExpressionNode, ...] = ()

@dataclass
class StatementNode:
    statement: Statement
    children: Optional[List["StatementNode"]] = None

    @property
    def is_block(self) -> bool:
        return self.children is not None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "line": self.statement.line,
            "command": self.statement.command,
            "args": [a.to_dict() for a in self.statement.args],
        }
        if self.children is not None:
            d["children"] = [c.to_dict() for c in self.children]
        return d

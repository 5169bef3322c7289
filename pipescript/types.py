from enum import Enum
from typing import Any, List, Union

from .lexer import format_literal

# Runtime values are plain Python objects: int, str, list of values, or None (nil).
Value = Union[None, int, str, List[Any]]

class ValueTag(str, Enum):
    Nil = "Nil"
    Number = "Number"
    String = "String"
    List = "List"

def tag_of(value: Any) -> ValueTag:
    """Classify a runtime value; anything outside the closed set is rejected."""
    if value is None:
        return ValueTag.Nil
    # bool is an int subclass but never a script value
    if isinstance(value, bool):
        raise TypeError(f"not a script value: {value!r}")
    if isinstance(value, int):
        return ValueTag.Number
    if isinstance(value, str):
        return ValueTag.String
    if isinstance(value, list):
        return ValueTag.List
    raise TypeError(f"not a script value: {value!r}")

def is_truthy(value: Value) -> bool:
    tag = tag_of(value)
    if tag == ValueTag.Nil:
        return False
    if tag == ValueTag.Number:
        return value != 0
    if tag == ValueTag.String:
        return value != ""
    return len(value) > 0

def render(value: Value) -> str:
    """Text form used by print and join."""
    tag = tag_of(value)
    if tag == ValueTag.Nil:
        return "nil"
    if tag == ValueTag.Number:
        return str(value)
    if tag == ValueTag.String:
        return value
    return "[" + ", ".join(_render_item(v) for v in value) + "]"

def _render_item(value: Value) -> str:
    if tag_of(value) == ValueTag.String:
        return format_literal(value)
    return render(value)

"""Standard command library.

Every handler follows the registry calling convention
``(value, args, line, env, children) -> new value``.
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .ast import ExpressionNode, StatementNode
from .environment import Environment
from .errors import ArityError, CommandLookupError, EvaluationError, ParseError, ScriptTypeError
from .evaluator import evaluate, variable_name
from .executor import execute
from .registry import CommandRegistry
from .types import ValueTag, is_truthy, render, tag_of

STANDARD_COMMANDS = CommandRegistry()
command = STANDARD_COMMANDS.register

Args = Sequence[ExpressionNode]
Body = Optional[List[StatementNode]]


def standard_registry() -> CommandRegistry:
    """A fresh copy of the standard commands, safe to extend."""
    return STANDARD_COMMANDS.copy()


def _check_arity(name: str, args: Args, line: int, *allowed: int) -> None:
    if len(args) in allowed:
        return
    if len(allowed) == 1:
        expected = _count(allowed[0])
    else:
        expected = " or ".join(str(n) for n in allowed) + " arguments"
    raise ArityError(f"Command `{name}` must have {expected}", line)

def _count(n: int) -> str:
    if n == 0:
        return "no arguments"
    return "one argument" if n == 1 else f"{n} arguments"

def _expect(value: Any, tag: ValueTag, name: str, line: int) -> None:
    actual = tag_of(value)
    if actual != tag:
        raise ScriptTypeError(
            f"Command `{name}` needs a {tag.value} value, got {actual.value}", line
        )

def _string_arg(args: Args, index: int, env: Environment, line: int) -> str:
    arg = evaluate(args[index], env, line, index)
    if tag_of(arg) != ValueTag.String:
        raise ScriptTypeError("Argument is not a string or a variable pointing to a string", line, index)
    return arg


@command("use")
def use(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("use", args, line, 1)
    path = _string_arg(args, 0, env, line)
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise EvaluationError(f"Cannot read {path}: not valid UTF-8 at byte {e.start}", line, 0) from e
    except OSError as e:
        raise EvaluationError(f"Cannot read {path}: {e.strerror or e}", line, 0) from e


@command("set")
def set_value(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("set", args, line, 1)
    return evaluate(args[0], env, line, 0)


@command("store")
def store(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("store", args, line, 1, 2)
    name = variable_name(args[0], line, 0)
    if len(args) == 1:
        env[name] = value
    else:
        env[name] = evaluate(args[1], env, line, 1)
    return value


@command("split")
def split(value, args: Args, line: int, env: Environment, children: Body):
    _expect(value, ValueTag.String, "split", line)
    _check_arity("split", args, line, 1)
    sep = _string_arg(args, 0, env, line)
    if sep == "":
        return list(value)
    return value.split(sep)


@command("join")
def join(value, args: Args, line: int, env: Environment, children: Body):
    _expect(value, ValueTag.List, "join", line)
    _check_arity("join", args, line, 0, 1)
    sep = _string_arg(args, 0, env, line) if args else ""
    return sep.join(render(item) for item in value)


@command("replace")
def replace(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("replace", args, line, 2)
    match = evaluate(args[0], env, line, 0)
    substitute = evaluate(args[1], env, line, 1)
    return substitute if value == match else value


@command("print")
def print_value(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("print", args, line, 0, 1)
    shown = evaluate(args[0], env, line, 0) if args else value
    print(render(shown), file=env.out)
    return value


@command("foreach", block=True)
def foreach(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("foreach", args, line, 0)
    _expect(value, ValueTag.List, "foreach", line)
    for i, item in enumerate(value):
        value[i] = execute(children or [], item, env)
    return value


@command("if", block=True)
def if_(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("if", args, line, 1)
    taken = is_truthy(evaluate(args[0], env, line, 0))
    env.chain_taken = taken
    return execute(children or [], value, env) if taken else value


@command("elif", block=True)
def elif_(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("elif", args, line, 1)
    if env.chain_taken is None:
        raise ParseError("'elif' without a preceding 'if' or 'elif'", line)
    if env.chain_taken:
        return value
    taken = is_truthy(evaluate(args[0], env, line, 0))
    env.chain_taken = taken
    return execute(children or [], value, env) if taken else value


@command("else", block=True)
def else_(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("else", args, line, 0)
    if env.chain_taken is None:
        raise ParseError("'else' without a preceding 'if' or 'elif'", line)
    if env.chain_taken:
        return value
    env.chain_taken = True
    return execute(children or [], value, env)


@command("function", block=True)
def function(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("function", args, line, 1)
    env.functions[variable_name(args[0], line, 0)] = list(children or [])
    return value


@command("call")
def call(value, args: Args, line: int, env: Environment, children: Body):
    _check_arity("call", args, line, 1)
    name = variable_name(args[0], line, 0)
    body = env.functions.get(name)
    if body is None:
        raise CommandLookupError(f"Function ${name} is not defined", line)
    if env.call_depth >= env.config.max_call_depth:
        raise EvaluationError(f"Call depth exceeded ({env.config.max_call_depth})", line)
    env.call_depth += 1
    try:
        return execute(body, value, env)
    finally:
        env.call_depth -= 1

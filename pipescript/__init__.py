from loguru import logger

from .config import Config
from .environment import Environment
from .errors import (
    ArityError,
    CommandLookupError,
    EvaluationError,
    LexError,
    ParseError,
    PipeScriptError,
    RegistrationError,
    ScriptTypeError,
    VariableReferenceError,
)
from .evaluator import evaluate
from .executor import execute
from .lexer import format_literal
from .parser import parse
from .registry import CommandRegistry
from .commands import standard_registry
from .runtime import Runtime, run

# library stays quiet unless the application opts in
logger.disable("pipescript")

__version__ = "0.1.0"

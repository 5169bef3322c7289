from typing import Optional


class PipeScriptError(Exception):
    """Base class for every fatal script error.

    Carries the 1-based source line and, for expression errors, the 0-based
    argument index, and renders them as ``Line N: Argument M: message``.
    """

    def __init__(self, message: str, line: Optional[int] = None, argnum: Optional[int] = None):
        self.message = message
        self.line = line
        self.argnum = argnum
        super().__init__(self._format())

    def _format(self) -> str:
        parts = []
        if self.line is not None:
            parts.append(f"Line {self.line}")
        if self.argnum is not None:
            parts.append(f"Argument {self.argnum}")
        parts.append(self.message)
        return ": ".join(parts)


class LexError(PipeScriptError):
    pass

class ParseError(PipeScriptError):
    pass

class ArityError(PipeScriptError):
    """Raised by a command handler invoked with the wrong number of arguments."""
    pass

class ScriptTypeError(PipeScriptError):
    """Raised when an operation meets a value of the wrong runtime kind."""
    pass

class CommandLookupError(PipeScriptError):
    pass

class VariableReferenceError(PipeScriptError):
    pass

class EvaluationError(PipeScriptError):
    pass

class RegistrationError(PipeScriptError):
    """Raised when a handler with an unusable signature is registered."""
    pass

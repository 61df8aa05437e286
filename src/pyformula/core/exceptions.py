"""
Custom exceptions for PyFormula.

Provides a hierarchy of exceptions for compilation, evaluation and
function registration, each carrying structured error information.
"""

from typing import Any


class FormulaEngineError(Exception):
    """
    Base exception for all PyFormula errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a plain dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Compile Errors
# =============================================================================


class CompileError(FormulaEngineError):
    """Formula could not be compiled. No Formula is produced."""


class FormulaSyntaxError(CompileError):
    """Formula text does not match the expression grammar."""

    def __init__(self, formula: str, position: int, construct: str) -> None:
        super().__init__(
            message=f"syntax error: unexpected {construct} (pos:{position})",
            code="SYNTAX_ERROR",
            details={
                "formula": formula,
                "position": position,
                "construct": construct,
            },
        )
        self.formula = formula
        self.position = position
        self.construct = construct


class LiteralError(CompileError):
    """Malformed or out-of-range numeric literal."""

    def __init__(self, text: str, position: int, reason: str = "malformed") -> None:
        super().__init__(
            message=f"invalid literal: {text} (pos:{position}): {reason}",
            code="INVALID_LITERAL",
            details={"text": text, "position": position, "reason": reason},
        )
        self.text = text
        self.position = position
        self.reason = reason


# =============================================================================
# Evaluation Errors
# =============================================================================


class EvaluationError(FormulaEngineError):
    """
    Evaluation of a compiled formula failed.

    Every evaluation error names the identifier involved and the character
    position where it appears in the formula source.
    """

    def __init__(
        self,
        message: str,
        name: str,
        position: int,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details={"name": name, "position": position, **(details or {})},
        )
        self.name = name
        self.position = position


class UnknownVariableError(EvaluationError):
    """Referenced variable is absent from the evaluation environment."""

    def __init__(self, name: str, position: int) -> None:
        super().__init__(
            message=f"unknown var: {name} (pos:{position})",
            name=name,
            position=position,
            code="UNKNOWN_VARIABLE",
        )


class UnknownFunctionError(EvaluationError):
    """Called function is absent from the registry."""

    def __init__(self, name: str, position: int) -> None:
        super().__init__(
            message=f"unknown func: {name} (pos:{position})",
            name=name,
            position=position,
            code="UNKNOWN_FUNCTION",
        )


class InsufficientArgumentsError(EvaluationError):
    """Function called with fewer arguments than its minimum arity."""

    def __init__(self, name: str, position: int, actual: int, expected: int) -> None:
        super().__init__(
            message=(
                f"insufficient args: {name} (pos:{position}) "
                f"got {actual}, expected {expected}"
            ),
            name=name,
            position=position,
            code="INSUFFICIENT_ARGUMENTS",
            details={"actual": actual, "expected": expected},
        )
        self.actual = actual
        self.expected = expected


class FunctionFaultError(EvaluationError):
    """A registered function raised while being invoked."""

    def __init__(
        self,
        name: str,
        position: int,
        reason: str,
        origin: str | None = None,
    ) -> None:
        super().__init__(
            message=f"panic func: {name} (pos:{position}): {reason} [{origin or 'unknown'}]",
            name=name,
            position=position,
            code="FUNCTION_FAULT",
            details={"reason": reason, "origin": origin},
        )
        self.reason = reason
        self.origin = origin


# =============================================================================
# Registration / Input Errors
# =============================================================================


class RegistrationError(FormulaEngineError):
    """Invalid function registration."""

    def __init__(self, name: Any, reason: str) -> None:
        super().__init__(
            message=f"cannot register function {name!r}: {reason}",
            code="INVALID_REGISTRATION",
            details={"name": str(name), "reason": reason},
        )
        self.name = name
        self.reason = reason


class VariableTypeError(FormulaEngineError, TypeError):
    """Variable value is not a real number."""

    def __init__(self, name: str | None, value: Any) -> None:
        label = f"variable '{name}'" if name is not None else "value"
        super().__init__(
            message=f"invalid {label} type {type(value).__name__}, must be numeric",
            code="INVALID_VARIABLE",
            details={
                "name": name,
                "type": type(value).__name__,
                "value": repr(value)[:100],
            },
        )
        self.name = name
        self.value = value

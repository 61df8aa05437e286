"""
PyFormula - compile arithmetic formulas once, evaluate them many times.

An embeddable expression engine: a host parses a formula such as
``"2 * pow(x, 3) + min(y, z)"`` into a reusable ``Formula`` and evaluates it
with different variable bindings, from one thread or many, without
re-parsing.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from pyformula.core.exceptions import (
    CompileError,
    EvaluationError,
    FormulaEngineError,
    FormulaSyntaxError,
    FunctionFaultError,
    InsufficientArgumentsError,
    LiteralError,
    RegistrationError,
    UnknownFunctionError,
    UnknownVariableError,
    VariableTypeError,
)
from pyformula.formula import (
    EvaluationResult,
    Formula,
    FunctionRegistry,
    Var,
    compile_formula,
)

__all__ = [
    "CompileError",
    "EvaluationError",
    "EvaluationResult",
    "Formula",
    "FormulaEngineError",
    "FormulaSyntaxError",
    "FunctionFaultError",
    "FunctionRegistry",
    "InsufficientArgumentsError",
    "LiteralError",
    "RegistrationError",
    "UnknownFunctionError",
    "UnknownVariableError",
    "Var",
    "VariableTypeError",
    "__version__",
    "compile_formula",
]

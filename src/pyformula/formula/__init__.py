"""Formula engine for PyFormula.

This module provides a complete arithmetic formula system supporting:
- Arithmetic operations (+, -, *, /, %)
- Parenthesized sub-expressions
- Variables bound at evaluation time, plus the constants pi, phi, e and nan
- Built-in math functions (sin, pow, hypot, min, max, erf, j0, ...)
- User functions registered per formula with a minimum arity
"""

from pyformula.formula.compiler import EvaluationResult, Formula, compile_formula
from pyformula.formula.evaluator import CONSTANTS, FormulaEvaluator
from pyformula.formula.functions import FORMULA_FUNCTIONS, register_function
from pyformula.formula.parser import FormulaParser
from pyformula.formula.registry import FunctionRegistry, RegisteredFunction
from pyformula.formula.variables import Var, to_float64

__all__ = [
    "CONSTANTS",
    "EvaluationResult",
    "Formula",
    "FormulaEvaluator",
    "FormulaParser",
    "FORMULA_FUNCTIONS",
    "FunctionRegistry",
    "RegisteredFunction",
    "Var",
    "compile_formula",
    "register_function",
    "to_float64",
]

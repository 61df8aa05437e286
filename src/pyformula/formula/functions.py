"""Formula functions for PyFormula.

Implements the built-in math catalog available in every formula.

Every function receives its arguments as positional floats and may assume
at least its registered minimum number of them; extra arguments are ignored
unless the function is variadic. Built-ins follow IEEE-754 semantics:
domain errors produce NaN and overflow produces an infinity, they never raise.
"""

import functools
import math
from fractions import Fraction
from typing import Callable

import numpy as np
from scipy import special

# Type alias for formula functions
FormulaFunction = Callable[..., float]

# Registry of formula functions: name -> (minimum arity, implementation)
FORMULA_FUNCTIONS: dict[str, tuple[int, FormulaFunction]] = {}


def register_function(
    name: str, min_arity: int = 1
) -> Callable[[FormulaFunction], FormulaFunction]:
    """Decorator to register a built-in formula function."""

    def decorator(func: FormulaFunction) -> FormulaFunction:
        FORMULA_FUNCTIONS[name] = (min_arity, func)
        return func

    return decorator


def _ufunc(ufunc: Callable[..., float], arity: int) -> FormulaFunction:
    """Wrap a numpy/scipy ufunc taking ``arity`` leading arguments."""

    @functools.wraps(ufunc)
    def wrapper(*args: float) -> float:
        with np.errstate(all="ignore"):
            return float(ufunc(*(float(a) for a in args[:arity])))

    return wrapper


# =============================================================================
# Direct Wrappers
# =============================================================================

_UNARY: dict[str, Callable[..., float]] = {
    "abs": np.fabs,
    "acos": np.arccos,
    "acosh": np.arccosh,
    "asin": np.arcsin,
    "asinh": np.arcsinh,
    "atan": np.arctan,
    "atanh": np.arctanh,
    "cbrt": np.cbrt,
    "ceil": np.ceil,
    "cos": np.cos,
    "cosh": np.cosh,
    "exp": np.exp,
    "exp2": np.exp2,
    "expm1": np.expm1,
    "floor": np.floor,
    "log": np.log,
    "log10": np.log10,
    "log1p": np.log1p,
    "log2": np.log2,
    "roundtoeven": np.rint,
    "sin": np.sin,
    "sinh": np.sinh,
    "sqrt": np.sqrt,
    "tan": np.tan,
    "tanh": np.tanh,
    "trunc": np.trunc,
    # Special functions
    "erf": special.erf,
    "erfc": special.erfc,
    "erfinv": special.erfinv,
    "erfcinv": special.erfcinv,
    "gamma": special.gamma,
    "j0": special.j0,
    "j1": special.j1,
    "y0": special.y0,
    "y1": special.y1,
}

_BINARY: dict[str, Callable[..., float]] = {
    "atan2": np.arctan2,
    "copysign": np.copysign,
    "hypot": np.hypot,
    "mod": np.fmod,
    "nextafter": np.nextafter,
    "pow": np.power,
}

for _name, _impl in _UNARY.items():
    register_function(_name, 1)(_ufunc(_impl, 1))

for _name, _impl in _BINARY.items():
    register_function(_name, 2)(_ufunc(_impl, 2))


# =============================================================================
# Variadic Functions
# =============================================================================


@register_function("max", 1)
def func_max(*args: float) -> float:
    """Return the greatest argument. NaN if any argument is NaN, +0 over -0."""
    values = np.asarray(args, dtype=np.float64)
    result = float(np.max(values))
    if result == 0:
        return -0.0 if np.signbit(values[values == 0]).all() else 0.0
    return result


@register_function("min", 1)
def func_min(*args: float) -> float:
    """Return the least argument. NaN if any argument is NaN, -0 over +0."""
    values = np.asarray(args, dtype=np.float64)
    result = float(np.min(values))
    if result == 0:
        return -0.0 if np.signbit(values[values == 0]).any() else 0.0
    return result


# =============================================================================
# Rounding & Exponent Functions
# =============================================================================


@register_function("round", 1)
def func_round(*args: float) -> float:
    """Round half away from zero."""
    x = float(args[0])
    if not math.isfinite(x):
        return x
    t = float(math.trunc(x))
    if abs(x - t) >= 0.5:
        t += math.copysign(1.0, x)
    return math.copysign(t, x)


@register_function("pow10", 1)
def func_pow10(*args: float) -> float:
    """Return 10 raised to the argument truncated to an integer."""
    x = float(args[0])
    if math.isnan(x):
        return math.nan
    if math.isinf(x):
        return math.inf if x > 0 else 0.0
    n = math.trunc(x)
    if n > 308:
        return math.inf
    if n < -323:
        return 0.0
    return float(f"1e{n}")


@register_function("logb", 1)
def func_logb(*args: float) -> float:
    """Return the binary exponent of the argument."""
    x = float(args[0])
    if x == 0:
        return -math.inf
    if math.isinf(x):
        return math.inf
    if math.isnan(x):
        return x
    return float(math.frexp(x)[1] - 1)


# =============================================================================
# Two-Argument Functions
# =============================================================================


@register_function("dim", 2)
def func_dim(*args: float) -> float:
    """Return the positive difference max(x - y, 0)."""
    v = float(args[0]) - float(args[1])
    if v <= 0:
        return 0.0
    return v


@register_function("remainder", 2)
def func_remainder(*args: float) -> float:
    """IEEE 754 remainder: x - n*y with n the integer nearest x/y."""
    x, y = float(args[0]), float(args[1])
    if math.isinf(x) or y == 0:
        return math.nan
    return math.remainder(x, y)


@register_function("jn", 2)
def func_jn(*args: float) -> float:
    """Bessel function of the first kind of integer order jn(n, x)."""
    n, x = float(args[0]), float(args[1])
    if not math.isfinite(n):
        return math.nan
    return float(special.jv(math.trunc(n), x))


@register_function("yn", 1)
def func_yn(*args: float) -> float:
    """Bessel function of the second kind of integer order yn(n, x)."""
    n, x = float(args[0]), float(args[1])
    if not math.isfinite(n):
        return math.nan
    return float(special.yn(math.trunc(n), x))


# =============================================================================
# Three-Argument Functions
# =============================================================================


@register_function("fma", 3)
def func_fma(*args: float) -> float:
    """Fused multiply-add x*y + z computed with a single rounding."""
    x, y, z = float(args[0]), float(args[1]), float(args[2])
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
        return x * y + z
    exact = Fraction(x) * Fraction(y) + Fraction(z)
    if exact == 0:
        # Let IEEE arithmetic choose the sign of zero.
        return x * y + z
    try:
        return float(exact)
    except OverflowError:
        return math.inf if exact > 0 else -math.inf

"""Variable bindings for formula evaluation.

Converts host numeric values to doubles and normalizes the different ways
a caller may supply variables to ``Formula.evaluate``.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any

import numpy as np

from pyformula.core.exceptions import VariableTypeError

_REAL_TYPES = (int, float, Decimal, Fraction, np.integer, np.floating)

Bindings = Mapping[str, Any] | Iterable[Any] | None


def to_float64(value: Any, name: str | None = None) -> float:
    """
    Convert a numeric value to a float.

    Args:
        value: Integer, float, Decimal, Fraction or numpy real scalar
        name: Variable name, used in the error message

    Returns:
        The value as a builtin float

    Raises:
        VariableTypeError: If the value is not a real number (bools included)
    """
    if type(value) is float:
        return value
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, _REAL_TYPES):
        raise VariableTypeError(name, value)
    try:
        return float(value)
    except OverflowError:
        # Integers beyond the double range.
        return math.inf if value > 0 else -math.inf
    except ValueError:
        # Signaling NaN decimals.
        raise VariableTypeError(name, value) from None


@dataclass(frozen=True, slots=True)
class Var:
    """A named variable passed to a formula when evaluating it."""

    name: str
    value: float

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise VariableTypeError(None, self.name)
        object.__setattr__(self, "value", to_float64(self.value, self.name))


def resolve_bindings(
    bindings: Bindings = None,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, float]:
    """
    Normalize caller-supplied variables into a name -> float mapping.

    Args:
        bindings: A mapping of name to value, or an iterable of ``Var``
            instances and ``(name, value)`` pairs
        overrides: Keyword-style bindings applied after ``bindings``

    Returns:
        Dictionary of variable values; later entries win
    """
    resolved: dict[str, float] = {}

    if bindings is None:
        pass
    elif isinstance(bindings, Mapping):
        for name, value in bindings.items():
            resolved[_check_name(name)] = to_float64(value, name)
    elif isinstance(bindings, (str, bytes)):
        raise VariableTypeError(None, bindings)
    else:
        for item in bindings:
            if isinstance(item, Var):
                resolved[item.name] = item.value
                continue
            try:
                name, value = item
            except (TypeError, ValueError):
                raise VariableTypeError(None, item) from None
            resolved[_check_name(name)] = to_float64(value, name)

    if overrides:
        for name, value in overrides.items():
            resolved[name] = to_float64(value, name)

    return resolved


def _check_name(name: Any) -> str:
    if not isinstance(name, str):
        raise VariableTypeError(None, name)
    return name

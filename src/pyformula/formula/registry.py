"""Function registry for PyFormula.

Maps function names to implementations and their minimum arity. Lookups
happen by name at evaluation time, so a formula may call a function that is
registered after it was compiled.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from pyformula.core.exceptions import RegistrationError
from pyformula.core.logging import get_logger
from pyformula.formula.functions import FORMULA_FUNCTIONS, FormulaFunction

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RegisteredFunction:
    """A callable made available to formulas."""

    name: str
    min_arity: int
    function: FormulaFunction


class FunctionRegistry:
    """
    Name -> function mapping consulted when a formula calls a function.

    Registering an existing name replaces it (last write wins). Names are
    case-sensitive. The registry is not synchronized: registering while
    another thread evaluates a formula that uses this registry must be
    guarded by the caller.
    """

    def __init__(self, functions: Mapping[str, RegisteredFunction] | None = None) -> None:
        self._functions: dict[str, RegisteredFunction] = dict(functions or {})

    @classmethod
    def with_defaults(cls) -> "FunctionRegistry":
        """Create a registry holding the built-in math catalog."""
        return cls(
            {
                name: RegisteredFunction(name, min_arity, func)
                for name, (min_arity, func) in FORMULA_FUNCTIONS.items()
            }
        )

    def register(self, name: str, min_arity: int, function: FormulaFunction) -> RegisteredFunction:
        """
        Make a function available to formulas.

        Args:
            name: Name used to call the function in formulas
            min_arity: Minimum number of arguments; calls with fewer fail
                without invoking the function
            function: Callable taking positional floats and returning a number

        Returns:
            The registered entry

        Raises:
            RegistrationError: If any argument is of the wrong kind
        """
        if not isinstance(name, str) or not name:
            raise RegistrationError(name, "name must be a non-empty string")
        if isinstance(min_arity, bool) or not isinstance(min_arity, int) or min_arity < 0:
            raise RegistrationError(name, "min_arity must be a non-negative integer")
        if not callable(function):
            raise RegistrationError(name, "function must be callable")

        if name in self._functions:
            logger.debug("Overriding formula function", extra={"function_name": name})

        entry = RegisteredFunction(name, min_arity, function)
        self._functions[name] = entry
        return entry

    def unregister(self, name: str) -> bool:
        """Remove a function. Returns False if it was not registered."""
        return self._functions.pop(name, None) is not None

    def resolve(self, name: str) -> RegisteredFunction | None:
        """Look up a function by name."""
        return self._functions.get(name)

    def names(self) -> list[str]:
        """Sorted names of all registered functions."""
        return sorted(self._functions)

    def copy(self) -> "FunctionRegistry":
        """Independent copy; later registrations on either side do not leak."""
        return FunctionRegistry(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[RegisteredFunction]:
        return iter(list(self._functions.values()))

    def __repr__(self) -> str:
        return f"FunctionRegistry(functions={len(self._functions)})"

"""Compiled formulas.

``compile_formula`` parses a formula once and returns a ``Formula`` that can be
evaluated any number of times with different variable bindings.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pyformula.core.config import get_settings
from pyformula.core.exceptions import CompileError, EvaluationError
from pyformula.core.logging import get_logger
from pyformula.formula.evaluator import CONSTANTS, FormulaEvaluator
from pyformula.formula.functions import FormulaFunction
from pyformula.formula.parser import (
    FormulaParser,
    Node,
    collect_functions,
    collect_variables,
)
from pyformula.formula.registry import FunctionRegistry, RegisteredFunction
from pyformula.formula.variables import Bindings, resolve_bindings

logger = get_logger(__name__)

# Shared parser, built on first use
_parser: FormulaParser | None = None


def _get_parser() -> FormulaParser:
    """Lazy load parser so importing the package stays cheap."""
    global _parser
    if _parser is None:
        _parser = FormulaParser()
    return _parser


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of ``Formula.evaluate_safe``: a value or the error that stopped evaluation."""

    value: float | None = None
    error: EvaluationError | None = None

    @property
    def success(self) -> bool:
        """Check if evaluation completed without errors."""
        return self.error is None


class Formula:
    """
    A parsed formula that is ready to be evaluated.

    A formula may be evaluated an unlimited number of times and from several
    threads at once; its tree never changes. Each formula owns its function
    registry, so functions registered on one formula are invisible to others.
    Registering while another thread evaluates the same formula is not safe.
    """

    __slots__ = ("_source", "_tree", "_evaluator", "_variables", "_functions")

    def __init__(self, source: str, tree: Node, registry: FunctionRegistry) -> None:
        self._source = source
        self._tree = tree
        self._evaluator = FormulaEvaluator(registry)
        self._variables = tuple(sorted(collect_variables(tree)))
        self._functions = tuple(sorted(collect_functions(tree)))

    @property
    def source(self) -> str:
        return self._source

    @property
    def tree(self) -> Node:
        return self._tree

    @property
    def registry(self) -> FunctionRegistry:
        return self._evaluator.registry

    @property
    def variables(self) -> tuple[str, ...]:
        """Identifiers the formula reads as variables or constants."""
        return self._variables

    @property
    def functions(self) -> tuple[str, ...]:
        """Names of the functions the formula calls."""
        return self._functions

    def register_function(
        self, name: str, min_arity: int, function: FormulaFunction
    ) -> RegisteredFunction:
        """
        Add a function usable by this formula.

        The function receives the evaluated arguments as positional floats and
        is never called with fewer than ``min_arity`` of them. Registering an
        existing name, built-ins included, replaces it.

        Args:
            name: Name used to call the function in the formula
            min_arity: Minimum number of arguments
            function: Callable returning a number

        Returns:
            The registered entry
        """
        return self.registry.register(name, min_arity, function)

    def evaluate(self, bindings: Bindings = None, /, **variables: Any) -> float:
        """
        Evaluate the formula.

        The constants pi/π, phi/Φ, e/E and nan are predefined unless the caller
        binds the same name.

        Args:
            bindings: Mapping of name to value, or iterable of ``Var`` /
                ``(name, value)`` pairs
            **variables: Further bindings; these win over ``bindings``

        Returns:
            The result as a float

        Raises:
            EvaluationError: Unknown variable or function, too few arguments,
                or a function that raised
            VariableTypeError: A bound value is not numeric
        """
        env = self._environment(resolve_bindings(bindings, variables))
        return self._evaluator.evaluate(self._tree, env)

    __call__ = evaluate

    def evaluate_safe(self, bindings: Bindings = None, /, **variables: Any) -> EvaluationResult:
        """
        Evaluate the formula, returning evaluation errors instead of raising them.

        Takes the same arguments as ``evaluate``. Invalid bindings still raise
        ``VariableTypeError``.
        """
        env = self._environment(resolve_bindings(bindings, variables))
        try:
            return EvaluationResult(value=self._evaluator.evaluate(self._tree, env))
        except EvaluationError as e:
            return EvaluationResult(error=e)

    @staticmethod
    def _environment(bound: Mapping[str, float]) -> dict[str, float]:
        if not get_settings().seed_constants:
            return dict(bound)
        return {**CONSTANTS, **bound}

    def __repr__(self) -> str:
        return f"Formula({self._source!r})"


def compile_formula(source: str, registry: FunctionRegistry | None = None) -> Formula:
    """
    Parse a formula so it can be evaluated.

    Called functions and variables are not checked here; they are resolved
    each time the formula is evaluated.

    Args:
        source: Formula text, e.g. ``"2 * pow(x, 2) + y"``
        registry: Functions for the formula. The formula keeps a copy, so
            later changes to ``registry`` do not affect it. Defaults to the
            built-in catalog (an empty registry if built-ins are disabled in
            settings).

    Returns:
        The compiled formula

    Raises:
        CompileError: If the text is not a valid formula
    """
    if not isinstance(source, str):
        raise TypeError(f"formula source must be a string, got {type(source).__name__}")

    try:
        tree = _get_parser().parse(source)
    except CompileError as e:
        logger.debug("Formula compilation failed", extra={"formula": source, "error": str(e)})
        raise

    if registry is not None:
        owned = registry.copy()
    elif get_settings().register_builtins:
        owned = FunctionRegistry.with_defaults()
    else:
        owned = FunctionRegistry()

    formula = Formula(source, tree, owned)
    logger.debug(
        "Compiled formula",
        extra={
            "formula": source,
            "variables": list(formula.variables),
            "functions": list(formula.functions),
        },
    )
    return formula

"""Formula evaluator for PyFormula.

Evaluates parsed formula trees against a variable environment.
"""

import math
import traceback
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from pyformula.core.exceptions import (
    FunctionFaultError,
    InsufficientArgumentsError,
    UnknownFunctionError,
    UnknownVariableError,
    VariableTypeError,
)
from pyformula.core.logging import get_logger
from pyformula.formula.parser import (
    BinaryOpNode,
    FunctionCallNode,
    Node,
    NumberNode,
    VariableNode,
)
from pyformula.formula.registry import FunctionRegistry, RegisteredFunction
from pyformula.formula.variables import to_float64

logger = get_logger(__name__)

PHI = (1 + math.sqrt(5)) / 2

# Seeded into every environment unless the caller binds the same name.
CONSTANTS: dict[str, float] = {
    "π": math.pi,
    "pi": math.pi,
    "Φ": PHI,
    "phi": PHI,
    "e": math.e,
    "E": math.e,
    "nan": math.nan,
}


# ==========================================================================
# Operator Implementations
# ==========================================================================


def _add(left: float, right: float) -> float:
    return left + right


def _subtract(left: float, right: float) -> float:
    return left - right


def _multiply(left: float, right: float) -> float:
    return left * right


def _divide(left: float, right: float) -> float:
    """IEEE division: x/0 is a signed infinity, 0/0 and nan/0 are NaN."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _modulo(left: float, right: float) -> float:
    """Floating point remainder with the sign of the dividend (C fmod)."""
    if right == 0 or math.isinf(left):
        return math.nan
    return math.fmod(left, right)


OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": _add,
    "-": _subtract,
    "*": _multiply,
    "/": _divide,
    "%": _modulo,
}


@dataclass(frozen=True, slots=True)
class _Reduce:
    """Work item: combine the already computed operand values of ``node``."""

    node: BinaryOpNode | FunctionCallNode
    entry: RegisteredFunction | None = None


class FormulaEvaluator:
    """
    Evaluates formula trees against variable values.

    The evaluator keeps no state between calls; all intermediate values live
    in locals of ``evaluate``, so one evaluator may serve several threads.
    Trees are walked with an explicit stack, so nesting depth is not limited
    by the interpreter's recursion limit.
    """

    def __init__(self, registry: FunctionRegistry | None = None):
        """
        Initialize evaluator.

        Args:
            registry: Functions available to the formula. Defaults to the
                built-in catalog.
        """
        self._registry = registry if registry is not None else FunctionRegistry.with_defaults()

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry

    def evaluate(self, ast: Node, variables: Mapping[str, float]) -> float:
        """
        Evaluate a tree.

        Args:
            ast: Root node to evaluate
            variables: Complete variable environment (constants included)

        Returns:
            Evaluation result

        Raises:
            EvaluationError: The first failure in left-to-right order
        """
        values: list[float] = []
        stack: list[Node | _Reduce] = [ast]

        while stack:
            item = stack.pop()

            if isinstance(item, _Reduce):
                node = item.node
                if isinstance(node, BinaryOpNode):
                    right = values.pop()
                    left = values.pop()
                    values.append(OPERATORS[node.operator](left, right))
                else:
                    count = len(node.arguments)
                    args = values[len(values) - count :]
                    del values[len(values) - count :]
                    values.append(self._invoke(item.entry, node, args))

            elif isinstance(item, NumberNode):
                values.append(item.value)

            elif isinstance(item, VariableNode):
                try:
                    values.append(variables[item.name])
                except KeyError:
                    raise UnknownVariableError(item.name, item.position) from None

            elif isinstance(item, BinaryOpNode):
                # Left is popped, and therefore evaluated, first.
                stack.append(_Reduce(item))
                stack.append(item.right)
                stack.append(item.left)

            elif isinstance(item, FunctionCallNode):
                entry = self._resolve(item)
                stack.append(_Reduce(item, entry))
                stack.extend(reversed(item.arguments))

            else:
                raise TypeError(f"Unknown node type: {type(item).__name__}")

        return values[0]

    def _resolve(self, node: FunctionCallNode) -> RegisteredFunction:
        """Look up the called function and check it gets enough arguments."""
        entry = self._registry.resolve(node.name)
        if entry is None:
            raise UnknownFunctionError(node.name, node.position)
        if len(node.arguments) < entry.min_arity:
            raise InsufficientArgumentsError(
                node.name,
                node.position,
                actual=len(node.arguments),
                expected=entry.min_arity,
            )
        return entry

    def _invoke(
        self,
        entry: RegisteredFunction,
        node: FunctionCallNode,
        args: list[float],
    ) -> float:
        """Call a registered function, converting anything it raises into a FunctionFaultError."""
        try:
            result = entry.function(*args)
        except Exception as e:
            origin = _fault_origin(e)
            logger.warning(
                "Formula function raised during evaluation",
                extra={
                    "function_name": node.name,
                    "position": node.position,
                    "origin": origin,
                },
                exc_info=True,
            )
            raise FunctionFaultError(node.name, node.position, _fault_reason(e), origin) from e

        try:
            return to_float64(result)
        except VariableTypeError as e:
            raise FunctionFaultError(
                node.name,
                node.position,
                f"returned non-numeric {type(result).__name__}",
            ) from e


def _fault_reason(error: BaseException) -> str:
    message = str(error)
    if message:
        return f"{type(error).__name__}: {message}"
    return type(error).__name__


def _fault_origin(error: BaseException) -> str | None:
    """``file:line`` of the innermost frame that raised, if it is not the call site itself."""
    frames = traceback.extract_tb(error.__traceback__)
    if len(frames) < 2:
        return None
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno}"


def evaluate_formula(
    formula_ast: Node,
    variables: Mapping[str, float],
    registry: FunctionRegistry | None = None,
) -> float:
    """
    Convenience function to evaluate a formula tree.

    Args:
        formula_ast: Parsed formula tree
        variables: Variable values (constants are added unless overridden)
        registry: Available functions; defaults to the built-in catalog

    Returns:
        Evaluation result
    """
    evaluator = FormulaEvaluator(registry)
    return evaluator.evaluate(formula_ast, {**CONSTANTS, **variables})

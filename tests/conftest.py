"""
Pytest configuration and fixtures for PyFormula tests.
"""

import pytest

from pyformula.formula.evaluator import FormulaEvaluator
from pyformula.formula.parser import FormulaParser
from pyformula.formula.registry import FunctionRegistry


@pytest.fixture(scope="session")
def parser() -> FormulaParser:
    """Shared parser; parsers hold no per-parse state."""
    return FormulaParser()


@pytest.fixture
def registry() -> FunctionRegistry:
    """Fresh registry with the built-in catalog."""
    return FunctionRegistry.with_defaults()


@pytest.fixture
def evaluator(registry: FunctionRegistry) -> FormulaEvaluator:
    """Evaluator bound to the ``registry`` fixture."""
    return FormulaEvaluator(registry)


@pytest.fixture
def calls() -> list[float]:
    """Records the arguments seen by the ``record`` function."""
    return []


@pytest.fixture
def recording_registry(registry: FunctionRegistry, calls: list[float]) -> FunctionRegistry:
    """Registry with ``record(x)``, which logs x to ``calls`` and returns it."""

    def record(*args: float) -> float:
        calls.append(args[0])
        return args[0]

    registry.register("record", 1, record)
    return registry

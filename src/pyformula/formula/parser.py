"""Formula parser for PyFormula.

Parses formula strings into an immutable evaluation tree using Lark.
"""

import math
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)

from pyformula.core.exceptions import CompileError, FormulaSyntaxError, LiteralError
from pyformula.formula.grammar import FORMULA_GRAMMAR

# Well-formed decimal literal: 42, 4.5, .5, 5., 1e3, 2.5E-3
_DECIMAL_LITERAL = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# AST Node types
@dataclass(frozen=True, slots=True)
class NumberNode:
    value: float
    position: int = 0


@dataclass(frozen=True, slots=True)
class VariableNode:
    name: str
    position: int = 0


@dataclass(frozen=True, slots=True)
class FunctionCallNode:
    name: str
    arguments: tuple["Node", ...]
    position: int = 0


@dataclass(frozen=True, slots=True)
class BinaryOpNode:
    operator: str
    left: "Node"
    right: "Node"
    position: int = 0


Node = Union[NumberNode, VariableNode, FunctionCallNode, BinaryOpNode]


def parse_number(text: str, position: int) -> float:
    """
    Convert a NUMBER token to a double.

    Args:
        text: Literal text as it appears in the formula
        position: Character offset of the literal

    Returns:
        The literal's value

    Raises:
        LiteralError: If the text is not a decimal literal or overflows a double
    """
    if not _DECIMAL_LITERAL.fullmatch(text):
        raise LiteralError(text, position)
    value = float(text)
    if math.isinf(value):
        raise LiteralError(text, position, reason="value out of range")
    return value


class FormulaTransformer(Transformer):
    """Transform Lark parse tree into AST nodes."""

    @v_args(inline=True)
    def number(self, token: Token) -> NumberNode:
        return NumberNode(parse_number(str(token), token.start_pos), token.start_pos)

    @v_args(inline=True)
    def variable(self, token: Token) -> VariableNode:
        return VariableNode(str(token), token.start_pos)

    def function_call(self, items: list) -> FunctionCallNode:
        name_token = items[0]
        args = tuple(items[1]) if len(items) > 1 and items[1] else ()
        return FunctionCallNode(str(name_token), args, name_token.start_pos)

    def arguments(self, items: list) -> list:
        return list(items)

    # Binary operators
    @v_args(inline=True)
    def add(self, left: Node, right: Node) -> BinaryOpNode:
        return BinaryOpNode("+", left, right, left.position)

    @v_args(inline=True)
    def sub(self, left: Node, right: Node) -> BinaryOpNode:
        return BinaryOpNode("-", left, right, left.position)

    @v_args(inline=True)
    def mul(self, left: Node, right: Node) -> BinaryOpNode:
        return BinaryOpNode("*", left, right, left.position)

    @v_args(inline=True)
    def div(self, left: Node, right: Node) -> BinaryOpNode:
        return BinaryOpNode("/", left, right, left.position)

    @v_args(inline=True)
    def mod(self, left: Node, right: Node) -> BinaryOpNode:
        return BinaryOpNode("%", left, right, left.position)


class FormulaParser:
    """
    Parser for PyFormula expressions.

    Parses formula strings into an evaluation tree. A parser holds no
    per-parse state and may be shared between threads.
    """

    def __init__(self) -> None:
        self._parser = Lark(
            FORMULA_GRAMMAR,
            parser="lalr",
            transformer=FormulaTransformer(),
        )

    def parse(self, formula: str) -> Node:
        """
        Parse a formula string into an evaluation tree.

        Args:
            formula: Formula string to parse

        Returns:
            Root node of the tree

        Raises:
            FormulaSyntaxError: If formula syntax is invalid
            LiteralError: If a numeric literal is malformed
        """
        try:
            return self._parser.parse(formula)
        except UnexpectedInput as e:
            raise _syntax_error(formula, e) from None
        except VisitError as e:
            if isinstance(e.orig_exc, CompileError):
                raise e.orig_exc from None
            raise

    def validate(self, formula: str) -> tuple[bool, str | None]:
        """
        Validate formula syntax.

        Args:
            formula: Formula string to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.parse(formula)
            return True, None
        except CompileError as e:
            return False, str(e)

    def get_variable_references(self, formula: str) -> list[str]:
        """
        Extract all variable references from a formula.

        Args:
            formula: Formula string

        Returns:
            Sorted list of variable names referenced in the formula
        """
        return sorted(collect_variables(self.parse(formula)))

    def get_function_references(self, formula: str) -> list[str]:
        """
        Extract all called function names from a formula.

        Args:
            formula: Formula string

        Returns:
            Sorted list of function names called in the formula
        """
        return sorted(collect_functions(self.parse(formula)))


def _syntax_error(formula: str, error: UnexpectedInput) -> FormulaSyntaxError:
    """Translate a Lark parse failure into a FormulaSyntaxError."""
    if isinstance(error, UnexpectedCharacters):
        construct, position = f"'{error.char}'", error.pos_in_stream
    elif isinstance(error, UnexpectedToken) and error.token.type != "$END":
        construct, position = f"'{error.token}'", error.token.start_pos
    else:
        # UnexpectedEOF, or UnexpectedToken at $END
        construct, position = "end of input", len(formula)
    if position is None or position < 0:
        position = len(formula)
    return FormulaSyntaxError(formula, position, construct)


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node of a tree, parents before children, without recursion."""
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, BinaryOpNode):
            stack.append(node.right)
            stack.append(node.left)
        elif isinstance(node, FunctionCallNode):
            stack.extend(reversed(node.arguments))


def collect_variables(root: Node) -> set[str]:
    """Names of all variables referenced in a tree."""
    return {node.name for node in iter_nodes(root) if isinstance(node, VariableNode)}


def collect_functions(root: Node) -> set[str]:
    """Names of all functions called in a tree."""
    return {node.name for node in iter_nodes(root) if isinstance(node, FunctionCallNode)}

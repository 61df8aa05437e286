"""Unit tests for FormulaParser."""

import pytest

from pyformula.core.exceptions import CompileError, FormulaSyntaxError, LiteralError
from pyformula.formula.parser import (
    BinaryOpNode,
    FormulaParser,
    FunctionCallNode,
    NumberNode,
    VariableNode,
    iter_nodes,
    parse_number,
)


class TestFormulaParser:
    """Tests for FormulaParser class."""

    def test_parser_initialization(self):
        """Test that parser initializes correctly."""
        parser = FormulaParser()
        assert parser is not None

    def test_parse_integer_literal(self, parser):
        """Test parsing integer literals as floats."""
        ast = parser.parse("42")
        assert ast == NumberNode(42.0, 0)
        assert isinstance(ast.value, float)

    def test_parse_decimal_literal(self, parser):
        """Test parsing decimal literals."""
        ast = parser.parse("3.14")
        assert ast.value == 3.14

    @pytest.mark.parametrize(
        "text,expected",
        [(".5", 0.5), ("5.", 5.0), ("1e3", 1000.0), ("2.5E-3", 0.0025), ("1e+2", 100.0)],
    )
    def test_parse_literal_forms(self, parser, text, expected):
        """Test the accepted spellings of numeric literals."""
        assert parser.parse(text).value == expected

    def test_parse_variable(self, parser):
        """Test parsing a variable reference."""
        ast = parser.parse("rate_1")
        assert ast == VariableNode("rate_1", 0)

    def test_parse_unicode_identifiers(self, parser):
        """Test that Greek letters are identifiers."""
        ast = parser.parse("π + Φ")
        assert ast.left == VariableNode("π", 0)
        assert ast.right == VariableNode("Φ", 4)

    def test_parse_arithmetic_addition(self, parser):
        """Test parsing addition."""
        ast = parser.parse("1 + 2")
        assert ast.operator == "+"
        assert ast.left.value == 1
        assert ast.right.value == 2

    @pytest.mark.parametrize("op", ["+", "-", "*", "/", "%"])
    def test_parse_binary_operators(self, parser, op):
        """Test every binary operator is recognized."""
        ast = parser.parse(f"a {op} b")
        assert isinstance(ast, BinaryOpNode)
        assert ast.operator == op

    def test_multiplication_binds_tighter_than_addition(self, parser):
        """Test operator precedence."""
        ast = parser.parse("1 + 2 * 3")
        assert ast.operator == "+"
        assert ast.left == NumberNode(1.0, 0)
        assert ast.right == BinaryOpNode("*", NumberNode(2.0, 4), NumberNode(3.0, 8), 4)

    def test_same_level_operators_associate_left(self, parser):
        """Test 10 - 4 - 3 parses as (10 - 4) - 3."""
        ast = parser.parse("10 - 4 - 3")
        assert ast.operator == "-"
        assert ast.right == NumberNode(3.0, 9)
        assert ast.left.operator == "-"
        assert ast.left.left.value == 10

    def test_parentheses_override_precedence(self, parser):
        """Test parenthesized sub-expressions."""
        ast = parser.parse("(1 + 2) * 3")
        assert ast.operator == "*"
        assert ast.left.operator == "+"

    def test_parse_function_call(self, parser):
        """Test parsing a function call with arguments."""
        ast = parser.parse("pow(x, 2)")
        assert isinstance(ast, FunctionCallNode)
        assert ast.name == "pow"
        assert ast.arguments == (VariableNode("x", 4), NumberNode(2.0, 7))
        assert ast.position == 0

    def test_parse_function_call_no_args(self, parser):
        """Test parsing a call without arguments."""
        ast = parser.parse("now()")
        assert ast == FunctionCallNode("now", (), 0)

    def test_parse_nested_function_calls(self, parser):
        """Test function arguments may be full expressions."""
        ast = parser.parse("max(1, min(x, 2) * 3)")
        assert ast.name == "max"
        assert len(ast.arguments) == 2
        assert ast.arguments[1].operator == "*"
        assert ast.arguments[1].left.name == "min"

    def test_function_names_keep_case(self, parser):
        """Test function names are not normalized."""
        assert parser.parse("Sin(1)").name == "Sin"

    def test_positions_are_source_offsets(self, parser):
        """Test nodes record where they start in the source."""
        ast = parser.parse("x +  foo(y)")
        assert ast.left.position == 0
        assert ast.right.position == 5
        assert ast.right.arguments[0].position == 9

    def test_whitespace_is_ignored(self, parser):
        """Test tabs and newlines between tokens."""
        ast = parser.parse("\t1\n+\n2 ")
        assert ast.operator == "+"

    def test_iter_nodes_visits_all_nodes(self, parser):
        """Test tree traversal order and completeness."""
        nodes = list(iter_nodes(parser.parse("f(a, 1) + b")))
        assert len(nodes) == 5
        assert isinstance(nodes[0], BinaryOpNode)
        assert nodes[1].name == "f"


class TestSyntaxErrors:
    """Tests for rejected syntax."""

    @pytest.mark.parametrize(
        "formula,position,construct",
        [
            ("", 0, "end of input"),
            ("1 +", 3, "end of input"),
            ("(1 + 2", 6, "end of input"),
            ("1 2", 2, "'2'"),
            ("2 ^ 3", 2, "'^'"),
            ("x $ y", 2, "'$'"),
            ("f(1,)", 4, "')'"),
        ],
    )
    def test_syntax_error_details(self, parser, formula, position, construct):
        """Test the reported position and construct of syntax errors."""
        with pytest.raises(FormulaSyntaxError) as exc:
            parser.parse(formula)
        assert exc.value.position == position
        assert exc.value.construct == construct
        assert exc.value.formula == formula

    @pytest.mark.parametrize("formula", ["-5", "2 * -3", "+1"])
    def test_unary_sign_is_rejected(self, parser, formula):
        """Test there is no unary minus or plus."""
        with pytest.raises(FormulaSyntaxError):
            parser.parse(formula)

    def test_unary_minus_error_position(self, parser):
        """Test the sign is reported where it appears."""
        with pytest.raises(FormulaSyntaxError) as exc:
            parser.parse("2 * -3")
        assert exc.value.position == 4

    @pytest.mark.parametrize("formula", ["x = 1", "a < b", '"text"', "x ** 2"])
    def test_constructs_outside_grammar_are_rejected(self, parser, formula):
        """Test comparisons, strings and power operators are not part of the grammar."""
        with pytest.raises(CompileError):
            parser.parse(formula)

    def test_syntax_error_is_compile_error(self, parser):
        """Test the error hierarchy."""
        with pytest.raises(CompileError):
            parser.parse("1 +")


class TestLiteralErrors:
    """Tests for malformed numeric literals."""

    @pytest.mark.parametrize(
        "formula,text,position",
        [
            ("1.2.3", "1.2.3", 0),
            ("2 * 0x1F", "0x1F", 4),
            ("1_000 + 1", "1_000", 0),
            ("2x", "2x", 0),
        ],
    )
    def test_malformed_literal(self, parser, formula, text, position):
        """Test malformed literals report the offending text and position."""
        with pytest.raises(LiteralError) as exc:
            parser.parse(formula)
        assert exc.value.text == text
        assert exc.value.position == position

    def test_literal_out_of_range(self, parser):
        """Test literals that overflow a double."""
        with pytest.raises(LiteralError) as exc:
            parser.parse("1 + 1e400")
        assert exc.value.position == 4
        assert exc.value.reason == "value out of range"

    def test_parse_number_direct(self):
        """Test literal conversion helper."""
        assert parse_number("12.5", 0) == 12.5
        with pytest.raises(LiteralError):
            parse_number("1..2", 3)


class TestValidationAndReferences:
    """Tests for validate and reference extraction."""

    def test_validate_valid_formula(self, parser):
        """Test validating a valid formula."""
        assert parser.validate("sin(x) + 1") == (True, None)

    def test_validate_invalid_formula(self, parser):
        """Test validating an invalid formula."""
        ok, message = parser.validate("sin(x) +")
        assert ok is False
        assert "syntax error" in message

    def test_validate_reports_literal_errors(self, parser):
        """Test validate also catches literal errors."""
        ok, message = parser.validate("1.2.3")
        assert ok is False
        assert "invalid literal" in message

    def test_get_variable_references(self, parser):
        """Test extracting variables, sorted and unique."""
        refs = parser.get_variable_references("y * x + f(x, z) - pi")
        assert refs == ["pi", "x", "y", "z"]

    def test_get_function_references(self, parser):
        """Test extracting called functions."""
        refs = parser.get_function_references("max(sin(x), sin(y), g())")
        assert refs == ["g", "max", "sin"]

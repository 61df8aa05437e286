"""Lark grammar definition for PyFormula expressions.

This grammar supports conventional arithmetic syntax:
- Arithmetic: +, -, *, /, % (remainder)
- Variables and constants: x, rate_1, pi, π
- Function calls: name(arg1, arg2, ...) with zero or more arguments
- Parenthesized sub-expressions
- Numeric literals: integers and decimals, optionally with an exponent

There is no unary minus; write ``0 - x``.
"""

# Lark grammar for formula parsing
FORMULA_GRAMMAR = r"""
    ?start: expr

    ?expr: term
        | expr "+" term -> add
        | expr "-" term -> sub

    ?term: factor
        | term "*" factor -> mul
        | term "/" factor -> div
        | term "%" factor -> mod

    ?factor: NUMBER -> number
        | NAME "(" [arguments] ")" -> function_call
        | NAME -> variable
        | "(" expr ")"

    arguments: expr ("," expr)*

    // Identifiers: a Unicode letter or underscore, then letters, digits, underscores
    NAME: /[^\W\d]\w*/

    // Any number-like run (1.2.3, 0x1F, 2x) is one token; parse_number rejects malformed ones.
    NUMBER: /(?:\d|\.\d)(?:[\w.]|(?<=\d[eE])[+-])*/

    // Whitespace handling
    %import common.WS
    %ignore WS
"""

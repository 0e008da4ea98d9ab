"""
Unit tests for the SexpParser class.
"""

import pytest
from sexpdata import Symbol

from rowwise.system.errors import SexpSyntaxError


# --- Test Valid S-expressions ---

def test_parse_simple_list(parser):
    """Test parsing a simple list with symbols and literals."""
    assert parser.parse_string("(+ a 2)") == [Symbol('+'), Symbol('a'), 2]

def test_parse_nested_list(parser):
    """Test parsing the row expression from the proposal."""
    expected_ast = [Symbol('+'), Symbol('a'), [Symbol('*'), 2, Symbol('b')]]
    assert parser.parse_string("(+ a (* 2 b))") == expected_ast

def test_parse_different_atom_types(parser):
    """Test parsing various atomic types."""
    expected_ast = [
        Symbol('data'),
        123,
        4.5,
        "hello",
        True,
        False,
        Symbol('symbol-name'),
    ]
    assert parser.parse_string("(data 123 4.5 \"hello\" true false symbol-name)") == expected_ast

def test_parse_integer_literal(parser):
    assert parser.parse_string("42") == 42

def test_parse_float_literal(parser):
    assert parser.parse_string("3.14159") == 3.14159

def test_parse_string_literal(parser):
    assert parser.parse_string("\"this is a string\"") == "this is a string"

def test_parse_symbol(parser):
    """Symbols with punctuation, like the table binding, stay symbols."""
    assert parser.parse_string("*table*") == Symbol('*table*')
    assert isinstance(parser.parse_string("by-row"), Symbol)

def test_parse_true_false_symbols(parser):
    assert parser.parse_string("true") is True
    assert parser.parse_string("false") is False

def test_parse_nil_is_empty_list(parser):
    assert parser.parse_string("nil") == []

def test_parse_empty_list(parser):
    assert parser.parse_string("()") == []

def test_parse_surrounding_whitespace(parser):
    assert parser.parse_string("   (+ x 1)\n") == [Symbol('+'), Symbol('x'), 1]


# --- Test Invalid S-expressions ---

def test_parse_unbalanced_open(parser):
    with pytest.raises(SexpSyntaxError):
        parser.parse_string("(+ a (* 2 b)")

def test_parse_unbalanced_close(parser):
    with pytest.raises(SexpSyntaxError):
        parser.parse_string("(+ a 1))")

def test_parse_multiple_expressions(parser):
    with pytest.raises(SexpSyntaxError, match="Multiple top-level"):
        parser.parse_string("(+ a 1) (+ b 2)")

@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_parse_empty_input(parser, text):
    with pytest.raises(SexpSyntaxError, match="empty"):
        parser.parse_string(text)

def test_parse_non_string_input(parser):
    with pytest.raises(TypeError):
        parser.parse_string(123)

def test_syntax_error_keeps_input(parser):
    """The offending text is carried on the error and in its message."""
    with pytest.raises(SexpSyntaxError) as excinfo:
        parser.parse_string("(oops")
    assert excinfo.value.sexp_string == "(oops"
    assert "(oops" in str(excinfo.value)

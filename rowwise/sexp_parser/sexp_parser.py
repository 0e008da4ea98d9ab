"""
Implementation of the SexpParser interface using the 'sexpdata' library.
Parses S-expression strings into Python Abstract Syntax Trees (ASTs).
"""

import logging
from typing import Any

from sexpdata import parse, ExpectNothing, ExpectClosingBracket

from rowwise.system.errors import SexpSyntaxError

logger = logging.getLogger(__name__)


class SexpParser:
    """
    Parses S-expression strings into Python ASTs (nested lists/atoms).

    Uses the 'sexpdata' library for the underlying parsing mechanism.
    The symbols 'true' and 'false' become Python booleans and 'nil'
    becomes the empty list.
    """

    def parse_string(self, sexp_string: str) -> Any:
        """
        Parses a single S-expression from a string.

        Args:
            sexp_string: The string containing the S-expression.

        Returns:
            The parsed S-expression as a Python AST (nested lists/atoms),
            with common symbols converted.

        Raises:
            SexpSyntaxError: If the input string has syntax errors, is empty,
                             or contains more than one top-level expression.
            TypeError: If the input is not a string.
        """
        if not isinstance(sexp_string, str):
            raise TypeError("Input must be a string.")

        logger.debug(f"Attempting to parse S-expression string: '{sexp_string}'")
        stripped_string = sexp_string.strip()

        if not stripped_string:
            logger.error("S-expression parsing failed: Input string is empty or contains only whitespace.")
            raise SexpSyntaxError(
                "Input string is empty or contains only whitespace.",
                sexp_string
            )

        try:
            top_level = parse(stripped_string,
                              nil='nil',     # 'nil' parses to []
                              true='true',   # Map 'true' symbol to True
                              false='false'  # Map 'false' symbol to False
                              )
        except ExpectClosingBracket as e:
            logger.error(f"S-expression syntax error (Unbalanced Parentheses): {e}")
            raise SexpSyntaxError("S-expression syntax error: Unbalanced parentheses or brackets.", sexp_string, error_details=str(e)) from e
        except ExpectNothing as e:
            logger.error(f"S-expression parsing failed: Unexpected closing bracket. Details: {e}")
            raise SexpSyntaxError("Unexpected content after the main expression.", sexp_string, error_details=str(e)) from e
        except ValueError as e:
            logger.error(f"S-expression syntax error (ValueError): {e}")
            raise SexpSyntaxError(f"S-expression syntax error: {e}", sexp_string, error_details=str(e)) from e
        except Exception as e:
            logger.exception(f"Unexpected error during S-expression parsing: {e}")
            raise SexpSyntaxError(
                f"An unexpected error occurred during S-expression parsing: {e}",
                sexp_string,
                error_details=str(e)
            ) from e

        if not top_level:
            # Only comments, for example
            raise SexpSyntaxError("Input string contains no expression.", sexp_string)
        if len(top_level) > 1:
            logger.error(f"S-expression syntax error: {len(top_level)} top-level expressions found.")
            raise SexpSyntaxError(
                "Multiple top-level S-expressions found. Use (progn ...) or ensure single expression.",
                sexp_string,
                error_details=f"Trailing content: {top_level[1:]}"
            )

        parsed_expression = top_level[0]
        logger.debug(f"Successfully parsed AST: {parsed_expression!r}")
        return parsed_expression

"""
System-wide custom error types.
"""
from typing import Dict, Optional


class SexpSyntaxError(ValueError):
    """
    Custom exception raised when S-expression parsing fails due to syntax errors.
    Inherits from ValueError for general compatibility but provides specific context.
    """
    def __init__(self, message: str, sexp_string: str, error_details: str = ""):
        """
        Initializes the SexpSyntaxError.

        Args:
            message: A high-level error message.
            sexp_string: The original S-expression string that caused the error.
            error_details: Specific details from the underlying parser, if available.
        """
        full_message = f"{message}\nInput: '{sexp_string}'"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.sexp_string = sexp_string
        self.error_details = error_details


class SexpEvaluationError(Exception):
    """
    Custom exception raised during the evaluation phase of S-expressions.
    Indicates runtime errors like invalid arguments, type mismatches or
    division by zero inside a primitive.
    """
    def __init__(self, message: str, expression: str = "", error_details: str = ""):
        """
        Initializes the SexpEvaluationError.

        Args:
            message: A high-level error message describing the evaluation failure.
            expression: The S-expression string or node being evaluated when the error occurred.
            error_details: Specific details about the error (e.g., from underlying exceptions).
        """
        full_message = f"{message}"
        if expression:
            full_message += f"\nExpression: '{expression}'"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.expression = expression
        self.error_details = error_details


class UnresolvedNameError(SexpEvaluationError, NameError):
    """
    Raised when a symbol is bound neither in the row scope nor in any
    enclosing scope. Still a NameError, so `except NameError` keeps working.
    """
    def __init__(self, name: str, expression: str = ""):
        super().__init__(f"Unbound symbol: Name '{name}' is not defined.", expression=expression)
        self.name = name


class RowCountMismatchError(ValueError):
    """Columns of a table (or a computed column) disagree on the row count."""

    def __init__(self, message: str, lengths: Optional[Dict[str, int]] = None):
        self.lengths = dict(lengths or {})
        if self.lengths:
            message += f"\nLengths: {self.lengths}"
        super().__init__(message)

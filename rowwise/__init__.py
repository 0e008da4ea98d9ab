"""Evaluate an expression once per row of a column table, binding column
names to that row's values, without putting the table into any special mode.
"""

from rowwise.operations.row_evaluator import evaluate_by_row, simplify_results
from rowwise.operations.mutate import mutate
from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.sexp_evaluator.sexp_evaluator import SexpEvaluator
from rowwise.sexp_parser.sexp_parser import SexpParser
from rowwise.system.errors import (
    RowCountMismatchError,
    SexpEvaluationError,
    SexpSyntaxError,
    UnresolvedNameError,
)
from rowwise.system.models import SimplifiedResults, Table

__version__ = "0.1.0"

__all__ = [
    "evaluate_by_row",
    "simplify_results",
    "mutate",
    "SexpEnvironment",
    "SexpEvaluator",
    "SexpParser",
    "RowCountMismatchError",
    "SexpEvaluationError",
    "SexpSyntaxError",
    "UnresolvedNameError",
    "SimplifiedResults",
    "Table",
]

"""Row-at-a-time evaluation and the mutate operator."""
from .row_evaluator import evaluate_by_row, simplify_results
from .mutate import mutate

__all__ = ["evaluate_by_row", "simplify_results", "mutate"]

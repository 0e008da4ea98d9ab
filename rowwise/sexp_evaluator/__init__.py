"""S-expression evaluator: environments, special forms, primitives and closures."""
from .sexp_environment import SexpEnvironment
from .sexp_evaluator import SexpEvaluator

__all__ = ["SexpEnvironment", "SexpEvaluator"]

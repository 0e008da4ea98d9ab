"""
Processor for S-expression special forms.
Special forms receive their arguments unevaluated and decide themselves
what to evaluate, and in which environment.
"""
import logging
from typing import Any, List, TYPE_CHECKING

from sexpdata import Symbol

from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.system.errors import SexpEvaluationError, UnresolvedNameError

# SexpNode is an alias for Any, representing a parsed S-expression node.
SexpNode = Any

TABLE_SYMBOL = "*table*"

if TYPE_CHECKING:
    from .sexp_evaluator import SexpEvaluator  # Forward reference for type hinting

logger = logging.getLogger(__name__)


class SpecialFormProcessor:
    """
    Processes special forms for the SexpEvaluator.
    Each method handles a specific special form and is responsible for
    its evaluation semantics, including managing argument evaluation
    and environment manipulation as required by the form.
    """
    def __init__(self, evaluator_instance: 'SexpEvaluator'):
        self.evaluator = evaluator_instance
        logger.debug("SpecialFormProcessor initialized.")

    def handle_if_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Handles the 'if' special form: (if condition then_branch else_branch)"""
        if len(arg_exprs) != 3:
            raise SexpEvaluationError("'if' requires 3 arguments: (if condition then_branch else_branch)", original_expr_str)

        cond_expr, then_expr, else_expr = arg_exprs
        condition_result = self.evaluator._eval(cond_expr, env)
        chosen_branch_expr = then_expr if condition_result else else_expr
        logger.debug(f"  'if' condition evaluated to {condition_result!r}, chose branch: {chosen_branch_expr}")
        return self.evaluator._eval(chosen_branch_expr, env)

    def handle_let_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Handles the 'let' special form: (let ((var expr)...) body...)"""
        if len(arg_exprs) < 1 or not isinstance(arg_exprs[0], list):
            raise SexpEvaluationError("'let' requires a bindings list and at least one body expression: (let ((var expr)...) body...)", original_expr_str)

        bindings_list_expr = arg_exprs[0]
        body_exprs = arg_exprs[1:]

        if not body_exprs:
            raise SexpEvaluationError("'let' requires at least one body expression.", original_expr_str)

        # Values are evaluated in the OUTER environment, then bound together in the inner one.
        evaluated_bindings = {}
        for binding_expr in bindings_list_expr:
            if not (isinstance(binding_expr, list) and len(binding_expr) == 2 and isinstance(binding_expr[0], Symbol)):
                raise SexpEvaluationError(f"Invalid 'let' binding format: expected (symbol expression), got {binding_expr}", original_expr_str)

            var_name_str = binding_expr[0].value()
            evaluated_bindings[var_name_str] = self.evaluator._eval(binding_expr[1], env)

        let_env = env.extend(evaluated_bindings)

        final_result: Any = []
        for body_item_expr in body_exprs:
            final_result = self.evaluator._eval(body_item_expr, let_env)
        return final_result

    def handle_progn_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Handles the 'progn' special form: (progn expr...)"""
        final_result: Any = []  # Default result for empty 'progn' is nil/[]
        for expr in arg_exprs:
            final_result = self.evaluator._eval(expr, env)
        return final_result

    def handle_quote_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Handles the 'quote' special form: (quote expression)"""
        if len(arg_exprs) != 1:
            raise SexpEvaluationError("'quote' requires exactly 1 argument", original_expr_str)
        return arg_exprs[0]

    def handle_and_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """
        Handles the 'and' special form: (and expr...)
        Returns the first falsey value, or the last value if all are truthy.
        (and) evaluates to True.
        """
        last_value: Any = True
        for expr in arg_exprs:
            last_value = self.evaluator._eval(expr, env)
            if not bool(last_value):
                return last_value
        return last_value

    def handle_or_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """
        Handles the 'or' special form: (or expr...)
        Returns the first truthy value, or the last value if all are falsey.
        (or) evaluates to False.
        """
        last_value: Any = False
        for expr in arg_exprs:
            last_value = self.evaluator._eval(expr, env)
            if bool(last_value):
                return last_value
        return last_value

    def handle_by_row_form(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """
        Handles the 'by-row' special form: (by-row expr)

        Evaluates `expr` once per row of the table bound to *table*, with each
        column name bound to that row's value. The current environment is the
        fallback scope, so names outside the table still resolve.
        """
        from rowwise.operations.row_evaluator import _evaluate_rows, as_table

        if len(arg_exprs) != 1:
            raise SexpEvaluationError("'by-row' requires exactly 1 argument: (by-row expression)", original_expr_str)

        try:
            table = env.lookup(TABLE_SYMBOL)
        except UnresolvedNameError as e:
            raise SexpEvaluationError(
                f"'by-row' needs a table bound to {TABLE_SYMBOL}; use it inside mutate or bind one in scope.",
                original_expr_str
            ) from e

        try:
            table = as_table(table)
        except (TypeError, ValueError) as e:
            raise SexpEvaluationError(f"'by-row' cannot use {TABLE_SYMBOL} as a table.", original_expr_str, error_details=str(e)) from e

        # The argument is already an AST node; a string node here is a literal
        return _evaluate_rows(table, arg_exprs[0], env, self.evaluator)

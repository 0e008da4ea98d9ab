"""
S-expression Evaluator implementation.
Parses and evaluates expressions over tabular data written in S-expression syntax.
Handles special forms, primitives, closures and Python callables found in scope.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from sexpdata import Symbol, Quoted as sexpdata_Quoted

from rowwise.sexp_parser.sexp_parser import SexpParser
from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from .sexp_closure import Closure
from .sexp_special_forms import SpecialFormProcessor
from .sexp_primitives import PrimitiveProcessor

from rowwise.system.errors import SexpEvaluationError


SexpNode = Any  # General type hint for AST nodes

logger = logging.getLogger(__name__)


def unquote(node: sexpdata_Quoted) -> Any:
    """Returns the datum wrapped by a sexpdata Quoted node ('foo -> foo)."""
    if hasattr(node, 'x'):
        return node.x
    return node.value()


class SexpEvaluator:
    """
    Parses and evaluates S-expression strings.
    Handles special forms, primitives, closures and Python callables.

    Errors are never translated at this level: unbound names surface as
    UnresolvedNameError and domain failures as SexpEvaluationError.
    """

    def __init__(self):
        self.parser = SexpParser()

        # Make Closure class accessible to helper processors
        self.Closure = Closure

        self.special_form_processor = SpecialFormProcessor(self)
        self.primitive_processor = PrimitiveProcessor(self)

        # Dispatch dictionaries for special forms and primitives
        self.SPECIAL_FORM_HANDLERS: Dict[str, Callable] = {
            "if": self.special_form_processor.handle_if_form,
            "let": self.special_form_processor.handle_let_form,
            "progn": self.special_form_processor.handle_progn_form,
            "quote": self.special_form_processor.handle_quote_form,
            "and": self.special_form_processor.handle_and_form,
            "or": self.special_form_processor.handle_or_form,
            "by-row": self.special_form_processor.handle_by_row_form,
        }
        self.PRIMITIVE_APPLIERS: Dict[str, Callable] = {
            "list": self.primitive_processor.apply_list_primitive,
            "length": self.primitive_processor.apply_length_primitive,
            "get-field": self.primitive_processor.apply_get_field_primitive,
            "log-message": self.primitive_processor.apply_log_message_primitive,
            "eq?": self.primitive_processor.apply_eq_primitive,
            "equal?": self.primitive_processor.apply_eq_primitive,  # Alias for eq?
            "null?": self.primitive_processor.apply_null_primitive,
            "nil?": self.primitive_processor.apply_null_primitive,  # Alias for null?
            "+": self.primitive_processor.apply_add_primitive,
            "-": self.primitive_processor.apply_subtract_primitive,
            "*": self.primitive_processor.apply_multiply_primitive,
            "/": self.primitive_processor.apply_divide_primitive,
            "<": self.primitive_processor.apply_less_than_primitive,
            ">": self.primitive_processor.apply_greater_than_primitive,
            "<=": self.primitive_processor.apply_less_equal_primitive,
            ">=": self.primitive_processor.apply_greater_equal_primitive,
            "=": self.primitive_processor.apply_num_equal_primitive,
            "string-append": self.primitive_processor.apply_string_append_primitive,
            "not": self.primitive_processor.apply_not_primitive,
            "map": self.primitive_processor.apply_map_primitive,
        }
        logger.debug(f"SexpEvaluator INITIALIZED. SPECIAL_FORM_HANDLERS keys: {list(self.SPECIAL_FORM_HANDLERS.keys())}")
        logger.debug(f"SexpEvaluator INITIALIZED. PRIMITIVE_APPLIERS keys: {list(self.PRIMITIVE_APPLIERS.keys())}")

    def parse(self, expr: Any) -> SexpNode:
        """Parses expression text; already-parsed AST nodes pass through unchanged."""
        if isinstance(expr, str) and not isinstance(expr, Symbol):
            return self.parser.parse_string(expr)
        return expr

    def evaluate_string(
        self,
        sexp_string: str,
        initial_env: Optional[SexpEnvironment] = None
    ) -> Any:
        """
        Parses and evaluates an S-expression string within a given environment.
        This is an outermost entry point, so a failure is logged here at ERROR.
        """
        logger.debug(f"Evaluating S-expression string: {sexp_string[:100]}")
        parsed_node = self.parser.parse_string(sexp_string)
        try:
            return self.evaluate(parsed_node, initial_env)
        except SexpEvaluationError as e:
            logger.error(f"S-expression evaluation error: {e}")
            raise

    def evaluate(self, node: SexpNode, env: Optional[SexpEnvironment] = None) -> Any:
        """
        Evaluates an already-parsed AST node. A fresh top-level scope is used when `env` is None.
        Called once per row by the row evaluator, so failures are only logged at debug here.
        """
        env = env if env is not None else SexpEnvironment()
        try:
            return self._eval(node, env)
        except SexpEvaluationError as e:
            if not e.expression:
                e.expression = str(node)
            logger.debug(f"evaluate: re-raising {type(e).__name__}: {e}")
            raise

    def apply_callable(self, func: Any, args: List[Any], original_expr_str: str) -> Any:
        """
        Applies a Closure or Python callable to already-evaluated arguments.
        Used by primitives (e.g. 'map') that call user functions.
        """
        if isinstance(func, Closure):
            if len(func.params_ast) != len(args):
                raise SexpEvaluationError(
                    f"Arity mismatch: Closure expects {len(func.params_ast)} arguments, got {len(args)}",
                    expression=original_expr_str
                )
            call_frame_env = func.make_call_frame(args)
            result: Any = []
            for body_node in func.body_ast:
                result = self._eval(body_node, call_frame_env)
            return result

        if callable(func):
            try:
                return func(*args)
            except SexpEvaluationError:
                raise
            except Exception as e:
                logger.exception(f"Error calling Python callable {func} with args {args}: {e}")
                raise SexpEvaluationError(f"Error invoking callable {func}: {e}", original_expr_str, error_details=str(e)) from e

        raise SexpEvaluationError(f"Cannot apply non-callable/non-closure operator: {func!r} (type: {type(func)})", original_expr_str)

    def _eval(self, node: SexpNode, env: SexpEnvironment) -> Any:
        """
        Internal recursive evaluation method for S-expression AST nodes.
        Handles base cases and dispatches list evaluation.
        """
        if isinstance(node, Symbol):
            return env.lookup(node.value())

        if isinstance(node, sexpdata_Quoted):
            return unquote(node)

        if not isinstance(node, list):
            # Numbers, strings, bools, None
            return node

        if not node:
            return []

        op_expr_node = node[0]
        if isinstance(op_expr_node, Symbol) and op_expr_node.value() == "lambda":
            return self._make_closure(node, env)

        return self._eval_list_form(node, env)

    def _make_closure(self, node: list, env: SexpEnvironment) -> Closure:
        if len(node) < 3:
            raise SexpEvaluationError(
                "'lambda' requires a parameter list and at least one body expression.",
                expression=str(node)
            )

        params_list_node = node[1]
        if not isinstance(params_list_node, list):
            raise SexpEvaluationError(
                "Lambda parameter definition must be a list of symbols.",
                expression=str(params_list_node)
            )

        for p_node in params_list_node:
            if not isinstance(p_node, Symbol):
                raise SexpEvaluationError(
                    f"Lambda parameters must be symbols, got {type(p_node)}: {p_node}",
                    expression=str(params_list_node)
                )

        return Closure(list(params_list_node), node[2:], env)

    def _eval_list_form(self, expr_list: list, env: SexpEnvironment) -> Any:
        """
        Evaluates a non-empty list expression.
        Dispatches to special form handlers or standard operator application.
        """
        original_expr_str = str(expr_list)
        op_expr_node = expr_list[0]
        arg_expr_nodes = expr_list[1:]

        if isinstance(op_expr_node, Symbol):
            op_name_str = op_expr_node.value()
            # 1. Special forms control evaluation of their own arguments
            if op_name_str in self.SPECIAL_FORM_HANDLERS:
                logger.debug(f"  _eval_list_form: Dispatching to Special Form Handler: {op_name_str}")
                return self.SPECIAL_FORM_HANDLERS[op_name_str](arg_expr_nodes, env, original_expr_str)

            # 2. Primitives
            if op_name_str in self.PRIMITIVE_APPLIERS:
                logger.debug(f"  _eval_list_form: Dispatching to Primitive Applier: {op_name_str}")
                return self.PRIMITIVE_APPLIERS[op_name_str](arg_expr_nodes, env, original_expr_str)

            # 3. Otherwise the operator is a variable (closure or Python callable)
            resolved_operator = env.lookup(op_name_str)
        elif isinstance(op_expr_node, list):
            resolved_operator = self._eval(op_expr_node, env)
        elif isinstance(op_expr_node, Closure) or callable(op_expr_node):
            resolved_operator = op_expr_node
        else:
            raise SexpEvaluationError(f"Operator in list form must be a symbol or another list, got {type(op_expr_node)}: {op_expr_node}", original_expr_str)

        evaluated_args = [self._eval(arg_node, env) for arg_node in arg_expr_nodes]
        return self.apply_callable(resolved_operator, evaluated_args, original_expr_str)

"""
Processor for S-expression primitives.
This module contains the PrimitiveProcessor class, which centralizes
the application logic for all built-in primitives in the S-expression language.

Numeric primitives operate on scalars only. Handing them a whole column
(a list) is a domain error, not an implicit broadcast.
"""
import logging
import operator
from typing import Any, Callable, List, TYPE_CHECKING

from sexpdata import Symbol

from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.system.errors import SexpEvaluationError

# SexpNode is an alias for Any, representing a parsed S-expression node.
SexpNode = Any

if TYPE_CHECKING:
    from .sexp_evaluator import SexpEvaluator  # Forward reference for type hinting

logger = logging.getLogger(__name__)


def is_number(value: Any) -> bool:
    """int or float, but not bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _describe(value: Any) -> str:
    if isinstance(value, list):
        return f"list of length {len(value)}"
    return type(value).__name__


class PrimitiveProcessor:
    """
    Applies primitives for the SexpEvaluator.
    Each method implements a specific primitive and is responsible for
    evaluating its arguments and performing the primitive's action.
    """
    def __init__(self, evaluator_instance: 'SexpEvaluator'):
        """
        Initializes the PrimitiveProcessor.

        Args:
            evaluator_instance: An instance of the SexpEvaluator used to
                                evaluate the primitives' arguments.
        """
        self.evaluator = evaluator_instance
        logger.debug("PrimitiveProcessor initialized.")

    def _eval_args(self, arg_exprs: List[SexpNode], env: SexpEnvironment) -> List[Any]:
        return [self.evaluator._eval(arg_node, env) for arg_node in arg_exprs]

    def _require_numbers(self, op_name: str, values: List[Any], original_expr_str: str) -> None:
        for i, val in enumerate(values):
            if not is_number(val):
                raise SexpEvaluationError(
                    f"'{op_name}' argument {i+1} must be a number, got {_describe(val)}.",
                    original_expr_str,
                    error_details=repr(val)[:200]
                )

    # --- Lists and fields ---

    def apply_list_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> List[Any]:
        """Applies the 'list' primitive: (list expr...)"""
        return self._eval_args(arg_exprs, env)

    def apply_length_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> int:
        """Applies the 'length' primitive: (length list-or-string)"""
        if len(arg_exprs) != 1:
            raise SexpEvaluationError("'length' requires exactly one argument.", original_expr_str)
        value = self.evaluator._eval(arg_exprs[0], env)
        if not isinstance(value, (list, str)):
            raise SexpEvaluationError(f"'length' argument must be a list or string, got {_describe(value)}.", original_expr_str)
        return len(value)

    def apply_get_field_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """
        Applies the 'get-field' primitive: (get-field object field-name)
        Works with dictionaries (key access) and other objects (attribute access).
        """
        if len(arg_exprs) != 2:
            raise SexpEvaluationError("'get-field' requires exactly two arguments: (get-field object field-name)", original_expr_str)

        target, field_name = self._eval_args(arg_exprs, env)
        if isinstance(field_name, Symbol):
            field_name = field_name.value()
        if not isinstance(field_name, str):
            raise SexpEvaluationError(f"'get-field' field name must be a string or symbol, got {_describe(field_name)}.", original_expr_str)

        if isinstance(target, dict):
            if field_name not in target:
                raise SexpEvaluationError(f"'get-field': key '{field_name}' not found.", original_expr_str)
            return target[field_name]
        if hasattr(target, field_name):
            return getattr(target, field_name)
        raise SexpEvaluationError(f"'get-field': object of type {type(target).__name__} has no field '{field_name}'.", original_expr_str)

    def apply_log_message_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Applies the 'log-message' primitive: (log-message expr...). Returns the last value."""
        values = self._eval_args(arg_exprs, env)
        logger.info("SEXP LOG: " + " ".join(str(v) for v in values))
        return values[-1] if values else []

    # --- Predicates ---

    def apply_eq_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        """Applies the 'eq?' primitive: (eq? a b), Python equality."""
        if len(arg_exprs) != 2:
            raise SexpEvaluationError("'eq?' requires exactly two arguments.", original_expr_str)
        val1, val2 = self._eval_args(arg_exprs, env)
        return val1 == val2

    def apply_null_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        """Applies the 'null?' primitive: true for None and the empty list."""
        if len(arg_exprs) != 1:
            raise SexpEvaluationError("'null?' requires exactly one argument.", original_expr_str)
        value = self.evaluator._eval(arg_exprs[0], env)
        return value is None or value == []

    def apply_not_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        """Applies the 'not' primitive: (not expr)"""
        if len(arg_exprs) != 1:
            raise SexpEvaluationError("'not' requires exactly one argument.", original_expr_str)
        return not bool(self.evaluator._eval(arg_exprs[0], env))

    # --- Arithmetic ---

    def apply_add_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Applies '+': n-ary sum, (+) is 0."""
        values = self._eval_args(arg_exprs, env)
        self._require_numbers("+", values, original_expr_str)
        return sum(values, 0)

    def apply_multiply_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Applies '*': n-ary product, (*) is 1."""
        values = self._eval_args(arg_exprs, env)
        self._require_numbers("*", values, original_expr_str)
        result = 1
        for val in values:
            result *= val
        return result

    def apply_subtract_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> Any:
        """Applies '-': unary negation or binary subtraction."""
        if not (1 <= len(arg_exprs) <= 2):
            raise SexpEvaluationError("'-' requires one or two numeric arguments.", original_expr_str)
        values = self._eval_args(arg_exprs, env)
        self._require_numbers("-", values, original_expr_str)
        if len(values) == 1:
            return -values[0]
        return values[0] - values[1]

    def apply_divide_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> float:
        """Applies '/': binary true division."""
        if len(arg_exprs) != 2:
            raise SexpEvaluationError("'/' requires exactly two numeric arguments.", original_expr_str)
        dividend, divisor = self._eval_args(arg_exprs, env)
        self._require_numbers("/", [dividend, divisor], original_expr_str)
        if divisor == 0:
            raise SexpEvaluationError("Division by zero.", original_expr_str, error_details=f"{dividend} / {divisor}")
        return dividend / divisor

    # --- Comparison ---

    def _compare(self, op_name: str, op: Callable[[Any, Any], bool], arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        if len(arg_exprs) != 2:
            raise SexpEvaluationError(f"'{op_name}' requires exactly two numeric arguments.", original_expr_str)
        val1, val2 = self._eval_args(arg_exprs, env)
        self._require_numbers(op_name, [val1, val2], original_expr_str)
        return op(val1, val2)

    def apply_less_than_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        return self._compare("<", operator.lt, arg_exprs, env, original_expr_str)

    def apply_greater_than_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        return self._compare(">", operator.gt, arg_exprs, env, original_expr_str)

    def apply_less_equal_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        return self._compare("<=", operator.le, arg_exprs, env, original_expr_str)

    def apply_greater_equal_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        return self._compare(">=", operator.ge, arg_exprs, env, original_expr_str)

    def apply_num_equal_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> bool:
        return self._compare("=", operator.eq, arg_exprs, env, original_expr_str)

    # --- Strings ---

    def apply_string_append_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> str:
        """
        Applies the 'string-append' primitive: (string-append str1 str2 ...)
        Numbers and symbols are converted to their text; None becomes "None".
        Raises SexpEvaluationError for any other type.
        """
        evaluated_parts = []
        for i, evaluated_value in enumerate(self._eval_args(arg_exprs, env)):
            if evaluated_value is None:
                evaluated_parts.append("None")
            elif isinstance(evaluated_value, Symbol):
                evaluated_parts.append(evaluated_value.value())
            elif isinstance(evaluated_value, str):
                evaluated_parts.append(evaluated_value)
            elif is_number(evaluated_value):
                evaluated_parts.append(str(evaluated_value))
            else:
                raise SexpEvaluationError(
                    f"'string-append' argument {i+1} must be a string, symbol, number, or nil. Got {_describe(evaluated_value)}: {evaluated_value!r}.",
                    original_expr_str
                )
        return ''.join(evaluated_parts)

    # --- Mapping ---

    def apply_map_primitive(self, arg_exprs: List[SexpNode], env: SexpEnvironment, original_expr_str: str) -> List[Any]:
        """
        Applies the 'map' primitive: (map fn list1 list2 ...)
        Calls `fn` with the i-th element of every list, for each i.
        All lists must have the same length.
        """
        if len(arg_exprs) < 2:
            raise SexpEvaluationError("'map' requires a function and at least one list: (map fn list...)", original_expr_str)

        func = self.evaluator._eval(arg_exprs[0], env)
        sequences = self._eval_args(arg_exprs[1:], env)
        for i, seq in enumerate(sequences):
            if not isinstance(seq, list):
                raise SexpEvaluationError(f"'map' argument {i+2} must be a list, got {_describe(seq)}.", original_expr_str)

        lengths = {len(seq) for seq in sequences}
        if len(lengths) > 1:
            raise SexpEvaluationError(
                "'map' lists must all have the same length.",
                original_expr_str,
                error_details=f"Lengths: {[len(seq) for seq in sequences]}"
            )

        logger.debug(f"  'map': applying {func!r} across {len(sequences)} list(s)")
        return [
            self.evaluator.apply_callable(func, list(items), original_expr_str)
            for items in zip(*sequences)
        ]

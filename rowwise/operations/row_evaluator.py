"""
Row-at-a-time evaluation of an expression over a column table.

`evaluate_by_row` binds every column name to the current row's value in a
child scope of the enclosing scope, evaluates the expression there, and
collects one result per row. The table never enters any "row-wise mode";
nothing about it changes.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from sexpdata import Symbol

from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.sexp_evaluator.sexp_evaluator import SexpEvaluator
from rowwise.system.errors import SexpEvaluationError
from rowwise.system.models import ResultKind, SimplifiedResults, Table

logger = logging.getLogger(__name__)

TableLike = Union[Table, Mapping[str, Sequence[Any]]]


def as_table(table: TableLike) -> Table:
    if isinstance(table, Table):
        return table
    if isinstance(table, Mapping):
        return Table.from_columns(table)
    raise TypeError(f"Expected a Table or a mapping of columns, got {type(table).__name__}.")


def evaluate_by_row(
    table: TableLike,
    expr: Any,
    enclosing_scope: Union[SexpEnvironment, Mapping[str, Any], None] = None,
    *,
    evaluator: Optional[SexpEvaluator] = None,
    simplify: bool = True,
) -> List[Any]:
    """
    Evaluates `expr` once per row of `table`, in row order.

    Args:
        table: A Table or a mapping of column name -> column values.
        expr: Expression text or an already-parsed AST.
        enclosing_scope: Fallback scope for names that are not columns.
                         A SexpEnvironment, a plain dict, or None.
        evaluator: The SexpEvaluator to use. A default one is created if omitted.
        simplify: Collapse uniform scalar results into a flat list (see simplify_results).

    Returns:
        One result per row, in row order.

    Raises:
        RowCountMismatchError: If the table's columns have differing lengths.
        UnresolvedNameError: If `expr` uses a name bound neither by the row nor the enclosing scope.
        SexpEvaluationError: If a row's evaluation fails. The first failure aborts the call.
    """
    table = as_table(table)
    evaluator = evaluator if evaluator is not None else SexpEvaluator()
    scope = SexpEnvironment.coerce(enclosing_scope)
    node = evaluator.parse(expr)

    try:
        return _evaluate_rows(table, node, scope, evaluator, simplify)
    except SexpEvaluationError as e:
        logger.error(f"evaluate_by_row failed: {e}")
        raise


def _evaluate_rows(
    table: Table,
    node: Any,
    scope: SexpEnvironment,
    evaluator: SexpEvaluator,
    simplify: bool = True,
) -> List[Any]:
    """
    Evaluates an already-parsed `node` once per row. Never parses: a string
    node is a string literal, not source text. Errors are not logged here.
    """
    row_count = table.row_count()
    logger.debug(f"evaluate_by_row: {row_count} rows, columns={table.column_names}, expr={node}")

    results = []
    for row_binding in table.rows():
        row_env = scope.extend(row_binding)
        results.append(evaluator.evaluate(node, row_env))

    if not simplify:
        return results
    return simplify_results(results).values


def _scalar_kind(value: Any) -> Optional[str]:
    """Kind of a combinable scalar, "null" for None, or None if the value cannot be combined."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "numeric"
    if isinstance(value, Symbol):
        return None
    if isinstance(value, str):
        return "string"
    return None


def simplify_results(results: Sequence[Any]) -> SimplifiedResults:
    """
    Collapses per-row results into a flat scalar list when they are uniform.

    Rules:
      * A length-1 list is unwrapped to its element; any other list, tuple
        or dict is multi-valued and prevents simplification.
      * Scalars have a kind: bool, numeric (int/float) or string. None is a
        missing value compatible with every kind. Anything else (closures,
        symbols, arbitrary objects) prevents simplification.
      * If every result is a scalar and the non-missing ones share a single
        kind, the flat list is returned. Numeric lists containing a float
        have their ints promoted to float.
      * Otherwise the per-row results are returned untouched.
    """
    unwrapped = []
    for value in results:
        if isinstance(value, list) and len(value) == 1:
            value = value[0]
        if isinstance(value, (list, tuple, dict)):
            logger.debug("simplify_results: multi-valued row result, keeping per-row results")
            return SimplifiedResults(values=list(results), simplified=False)
        unwrapped.append(value)

    kinds = set()
    for value in unwrapped:
        kind = _scalar_kind(value)
        if kind is None:
            return SimplifiedResults(values=list(results), simplified=False)
        if kind != "null":
            kinds.add(kind)

    if len(kinds) > 1:
        logger.debug(f"simplify_results: mixed kinds {sorted(kinds)}, keeping per-row results")
        return SimplifiedResults(values=list(results), simplified=False)

    kind: Optional[ResultKind]
    if kinds:
        kind = kinds.pop()
    elif unwrapped:
        kind = "null"
    else:
        kind = None

    if kind == "numeric" and any(isinstance(v, float) for v in unwrapped):
        unwrapped = [float(v) if v is not None else None for v in unwrapped]

    return SimplifiedResults(values=unwrapped, simplified=True, kind=kind)

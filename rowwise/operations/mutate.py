"""
The host table-transformation operator.

`mutate` adds or replaces columns by evaluating expressions against the
whole table: each column name is bound to its full column (a list), so an
expression sees vectors, not row values. Row-at-a-time work is expressed
inside the expression with `(by-row ...)` or `(map ...)`.
"""

import logging
from typing import Any, Mapping, Optional, Union

from rowwise.operations.row_evaluator import TableLike, as_table
from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.sexp_evaluator.sexp_evaluator import SexpEvaluator
from rowwise.sexp_evaluator.sexp_special_forms import TABLE_SYMBOL
from rowwise.system.errors import RowCountMismatchError, SexpEvaluationError
from rowwise.system.models import Table

logger = logging.getLogger(__name__)

ROW_COUNT_SYMBOL = "n"


def column_scope(table: Table, enclosing_scope: SexpEnvironment) -> SexpEnvironment:
    """
    Builds the vectorized scope for a table: every column bound to its full
    list, plus *table* and the row count `n` (unless a column is named `n`).
    """
    bindings = {name: table.column(name) for name in table.column_names}
    bindings[TABLE_SYMBOL] = table
    if ROW_COUNT_SYMBOL not in bindings:
        bindings[ROW_COUNT_SYMBOL] = table.row_count()
    return enclosing_scope.extend(bindings)


def mutate(
    table: TableLike,
    enclosing_scope: Union[SexpEnvironment, Mapping[str, Any], None] = None,
    *,
    evaluator: Optional[SexpEvaluator] = None,
    **columns: Any,
) -> Table:
    """
    Returns a new table with each keyword's expression evaluated as a column.

    Columns are computed in keyword order and later expressions see the
    columns produced by earlier ones. A scalar result is recycled to the
    row count; a list result must have exactly one value per row.

    Raises:
        RowCountMismatchError: If the table is ragged or a result has the wrong length.
        UnresolvedNameError, SexpEvaluationError: Propagated from evaluation; no column is added.
    """
    current = as_table(table)
    evaluator = evaluator if evaluator is not None else SexpEvaluator()
    scope = SexpEnvironment.coerce(enclosing_scope)

    for name, expr in columns.items():
        row_count = current.row_count()
        node = evaluator.parse(expr)
        logger.info(f"mutate: computing column '{name}' over {row_count} rows")

        try:
            value = evaluator.evaluate(node, column_scope(current, scope))
        except SexpEvaluationError as e:
            logger.error(f"mutate: column '{name}' failed: {e}")
            raise

        if isinstance(value, list):
            if len(value) != row_count:
                logger.error(f"mutate: column '{name}' has {len(value)} values for {row_count} rows")
                raise RowCountMismatchError(
                    f"Expression for column '{name}' produced {len(value)} values; expected {row_count}.",
                    {name: len(value), "rows": row_count}
                )
            values = value
        else:
            values = [value] * row_count

        current = current.with_column(name, values)

    return current

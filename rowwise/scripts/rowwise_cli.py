#!/usr/bin/env python3
"""
Apply mutate expressions to a JSON table from the command line.

The input is either column-oriented ({"a": [1, 2], "b": [3, 4]}) or a list
of records ([{"a": 1, "b": 3}, ...]); '-' reads standard input.

Usage:
    rowwise data.json --mutate "y=(by-row (+ a (* 2 b)))"

Example:
    echo '{"x": [10, 11]}' | rowwise - --set k=100 --mutate "y=(by-row (+ x k))" --format json
"""

import argparse
import json
import sys
from typing import Any, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from rowwise.config.logging_config import default_log_level, get_logger, setup_logging
from rowwise.operations.mutate import mutate
from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.sexp_evaluator.sexp_evaluator import SexpEvaluator
from rowwise.system.errors import RowCountMismatchError, SexpEvaluationError, SexpSyntaxError
from rowwise.system.models import Table

logger = get_logger(__name__)

console = Console()
error_console = Console(stderr=True)


def name_expr_pair(text: str) -> Tuple[str, str]:
    """argparse type for NAME=EXPR arguments."""
    name, sep, expr = text.partition("=")
    name = name.strip()
    if not sep or not name or not expr.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=EXPR, got {text!r}")
    return name, expr


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rowwise",
        description="Add columns to a JSON table by evaluating S-expressions.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("input", help="Path to a JSON table, or '-' for stdin")
    parser.add_argument("--mutate", dest="mutations", metavar="NAME=EXPR", type=name_expr_pair,
                        action="append", default=[],
                        help="Column to add or replace; repeatable, applied in order")
    parser.add_argument("--set", dest="constants", metavar="NAME=LITERAL", type=name_expr_pair,
                        action="append", default=[],
                        help="Constant in the enclosing scope; the literal is evaluated as an S-expression")
    parser.add_argument("--format", choices=["table", "json"], default="table",
                        help="Output format")
    parser.add_argument("--log-level", default=default_log_level(),
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--log-file", default=None,
                        help="Write logs to this file instead of stdout")
    return parser


def load_table(source: str) -> Table:
    """Reads a column-oriented or record-oriented JSON table."""
    if source == "-":
        data = json.load(sys.stdin)
    else:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)

    if isinstance(data, dict):
        return Table.from_columns(data)
    if isinstance(data, list):
        return Table.from_records(data)
    raise ValueError(f"JSON table must be an object of columns or a list of records, got {type(data).__name__}.")


def build_scope(evaluator: SexpEvaluator, constants: List[Tuple[str, str]]) -> SexpEnvironment:
    """Evaluates each --set literal, in order, into a fresh top-level scope."""
    scope = SexpEnvironment()
    for name, literal in constants:
        scope.define(name, evaluator.evaluate_string(literal, scope))
    return scope


def render_table(table: Table) -> None:
    rich_table = RichTable(show_header=True, header_style="bold")
    for name in table.column_names:
        rich_table.add_column(name)
    for row in table.rows():
        rich_table.add_row(*[_format_cell(value) for value in row.values()])
    console.print(rich_table)


def _format_cell(value: Any) -> str:
    if value is None:
        return "[dim]nil[/dim]"
    return escape(str(value))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    evaluator = SexpEvaluator()
    try:
        table = load_table(args.input)
        logger.info(f"Loaded table from {args.input}: columns={table.column_names}")
        scope = build_scope(evaluator, args.constants)
        result = mutate(table, scope, evaluator=evaluator, **dict(args.mutations))
    except (OSError, ValueError) as e:
        # SexpSyntaxError and RowCountMismatchError are ValueErrors too
        kind = type(e).__name__ if isinstance(e, (SexpSyntaxError, RowCountMismatchError)) else "Input error"
        logger.error(f"{kind}: {e}")
        error_console.print(f"[red]{kind}: {escape(str(e))}[/red]")
        return 1
    except SexpEvaluationError as e:
        error_console.print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        return 1

    if args.format == "json":
        sys.stdout.write(json.dumps(result.to_records(), default=str) + "\n")
    else:
        render_table(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())

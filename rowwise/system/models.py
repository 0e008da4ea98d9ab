"""
System-wide Pydantic models: the column table and row-wise result types.
"""

import logging
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from rowwise.system.errors import RowCountMismatchError

# Configure logger
logger = logging.getLogger(__name__)


# --- Table Types ---

class Table(BaseModel):
    """
    An ordered collection of equal-length named columns.
    Rows are implied by the shared index. Tables are immutable; every
    transformation returns a new instance.

    Column values are stored as tuples so they cannot be changed in place.
    The `columns` dict itself is shallow-frozen: reassigning the field is
    rejected, but callers must not add or remove keys on it directly.
    """
    model_config = ConfigDict(frozen=True)

    columns: Dict[str, Tuple[Any, ...]] = Field(default_factory=dict, description="Column name -> column values, in column order.")

    @classmethod
    def from_columns(cls, columns: Mapping[str, Sequence[Any]]) -> "Table":
        """
        Builds a table from any mapping of column name to a list or tuple of values.

        Raises:
            ValueError: If a column is not a list or tuple (a bare string or number is not a column).
        """
        built = {}
        for name, values in columns.items():
            if not isinstance(values, (list, tuple)):
                raise ValueError(f"Column '{name}' must be a list of values, got {type(values).__name__}.")
            built[str(name)] = tuple(values)
        return cls(columns=built)

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> "Table":
        """
        Builds a table from a list of row dictionaries.
        Column order follows first appearance; keys missing from a record become None.

        Raises:
            ValueError: If a record is not a mapping.
        """
        names: List[str] = []
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise ValueError(f"Record {index} must be an object of column values, got {type(record).__name__}.")
            for key in record:
                if key not in names:
                    names.append(key)
        columns = {name: tuple(record.get(name) for record in records) for name in names}
        logger.debug(f"Table.from_records: {len(records)} records -> columns {names}")
        return cls(columns=columns)

    @property
    def column_names(self) -> List[str]:
        return list(self.columns.keys())

    def column(self, name: str) -> List[Any]:
        """Returns a copy of the named column. Raises KeyError for unknown names."""
        return list(self.columns[name])

    def row_count(self) -> int:
        """
        Number of rows shared by every column.

        A table with no columns has zero rows.

        Raises:
            RowCountMismatchError: If the columns have differing lengths.
        """
        lengths = {name: len(values) for name, values in self.columns.items()}
        distinct = set(lengths.values())
        if len(distinct) > 1:
            logger.error(f"Table columns have differing lengths: {lengths}")
            raise RowCountMismatchError("Table columns must all have the same length.", lengths)
        return distinct.pop() if distinct else 0

    def row(self, index: int) -> Dict[str, Any]:
        """Builds a fresh row binding: column name -> value at `index`."""
        return {name: values[index] for name, values in self.columns.items()}

    def rows(self) -> Iterator[Dict[str, Any]]:
        """Yields row bindings in row order."""
        for index in range(self.row_count()):
            yield self.row(index)

    def with_column(self, name: str, values: Sequence[Any]) -> "Table":
        """
        Returns a new table with `name` set to `values`.
        An existing column keeps its position; a new one is appended.
        """
        new_columns = dict(self.columns)
        new_columns[name] = tuple(values)
        return Table(columns=new_columns)

    def to_records(self) -> List[Dict[str, Any]]:
        return list(self.rows())


# --- Row-wise Result Types ---

ResultKind = Literal["numeric", "bool", "string", "null"]
"""
Kinds of scalar a simplified result sequence can hold
"""


class SimplifiedResults(BaseModel):
    """
    Outcome of the simplification step applied to per-row results.
    When `simplified` is False, `values` holds the per-row results untouched.
    """
    values: List[Any]
    simplified: bool
    kind: Optional[ResultKind] = None

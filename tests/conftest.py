import pytest

from rowwise.sexp_evaluator.sexp_environment import SexpEnvironment
from rowwise.sexp_evaluator.sexp_evaluator import SexpEvaluator
from rowwise.sexp_parser.sexp_parser import SexpParser
from rowwise.system.models import Table


# --- Core Components ---

@pytest.fixture
def parser():
    """Provides a SexpParser instance for tests."""
    return SexpParser()

@pytest.fixture
def evaluator():
    """Provides a fresh SexpEvaluator instance."""
    return SexpEvaluator()

@pytest.fixture
def global_env():
    """Provides an empty top-level environment."""
    return SexpEnvironment()


# --- Tables ---

@pytest.fixture
def ab_table():
    """Two numeric columns, two rows."""
    return Table.from_columns({"a": [10, 11], "b": [3, 4]})

@pytest.fixture
def x_table():
    """A single numeric column."""
    return Table.from_columns({"x": [10, 11]})

@pytest.fixture
def empty_table():
    """Columns present, zero rows."""
    return Table.from_columns({"a": [], "b": []})


# --- Side-effect recorder ---

@pytest.fixture
def recorder():
    """
    A Python callable that records every value it is called with.
    Bind it into an enclosing scope to observe per-row evaluation order.
    """
    seen = []

    def record(value):
        seen.append(value)
        return value

    record.seen = seen
    return record

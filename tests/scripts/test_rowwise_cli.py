"""
Tests for the rowwise command-line script (rowwise/scripts/rowwise_cli.py).
"""

import io
import json
import logging

import pytest

from rowwise.scripts import rowwise_cli
from rowwise.scripts.rowwise_cli import build_parser, load_table, main, name_expr_pair


@pytest.fixture(autouse=True)
def mock_setup_logging(mocker):
    """Keeps the CLI from reconfiguring the root logger during tests."""
    return mocker.patch('rowwise.scripts.rowwise_cli.setup_logging')

@pytest.fixture
def columns_file(tmp_path):
    path = tmp_path / "table.json"
    path.write_text(json.dumps({"a": [10, 11], "b": [3, 4]}))
    return str(path)

@pytest.fixture
def records_file(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps([{"x": 10}, {"x": 11}]))
    return str(path)


# --- Argument parsing ---

def test_name_expr_pair():
    assert name_expr_pair("y=(+ a 1)") == ("y", "(+ a 1)")
    assert name_expr_pair(" y =(eq? a \"=\")") == ("y", "(eq? a \"=\")")

@pytest.mark.parametrize("text", ["y", "=(+ a 1)", "y=", "y=  "])
def test_name_expr_pair_rejects_malformed(text):
    with pytest.raises(Exception):
        name_expr_pair(text)

def test_parser_defaults(monkeypatch):
    monkeypatch.delenv("ROWWISE_LOG_LEVEL", raising=False)
    args = build_parser().parse_args(["data.json"])
    assert args.mutations == []
    assert args.constants == []
    assert args.format == "table"
    assert args.log_level == "WARNING"

def test_malformed_mutate_exits_with_usage_error(columns_file):
    with pytest.raises(SystemExit) as excinfo:
        main([columns_file, "--mutate", "no-equals-sign"])
    assert excinfo.value.code == 2


# --- Loading ---

def test_load_columns(columns_file):
    assert load_table(columns_file).columns == {"a": (10, 11), "b": (3, 4)}

def test_load_records(records_file):
    assert load_table(records_file).column("x") == [10, 11]

def test_load_rejects_scalar_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("42")
    with pytest.raises(ValueError):
        load_table(str(path))


# --- End to end ---

def test_json_output(columns_file, capsys):
    code = main([columns_file, "--mutate", "y=(by-row (+ a (* 2 b)))", "--format", "json"])
    assert code == 0
    records = json.loads(capsys.readouterr().out)
    assert records == [{"a": 10, "b": 3, "y": 16}, {"a": 11, "b": 4, "y": 19}]

def test_table_output(columns_file, capsys):
    code = main([columns_file, "--mutate", "y=(map (lambda (a b) (+ a (* 2 b))) a b)"])
    assert code == 0
    out = capsys.readouterr().out
    for header in ("a", "b", "y"):
        assert header in out
    assert "16" in out and "19" in out

def test_set_constants(records_file, capsys):
    code = main([records_file, "--set", "k=100", "--set", "j=(* k 2)",
                 "--mutate", "y=(by-row (+ x k j))", "--format", "json"])
    assert code == 0
    records = json.loads(capsys.readouterr().out)
    assert [r["y"] for r in records] == [310, 311]

def test_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({"x": [1, 2]})))
    code = main(["-", "--mutate", "y=(by-row (* x 3))", "--format", "json"])
    assert code == 0
    assert [r["y"] for r in json.loads(capsys.readouterr().out)] == [3, 6]

def test_evaluation_error_exit_code(columns_file, capsys):
    code = main([columns_file, "--mutate", "y=(+ a (* 2 b))"])
    assert code == 1
    assert "SexpEvaluationError" in capsys.readouterr().err

def test_unknown_name_exit_code(columns_file, capsys):
    code = main([columns_file, "--mutate", "y=(by-row (+ a missing))"])
    assert code == 1
    assert "missing" in capsys.readouterr().err

def test_syntax_error_exit_code(columns_file, capsys):
    code = main([columns_file, "--mutate", "y=(by-row (+ a b)"])
    assert code == 1
    assert "SexpSyntaxError" in capsys.readouterr().err

def test_missing_file_exit_code(tmp_path, capsys):
    code = main([str(tmp_path / "nope.json")])
    assert code == 1
    assert "Input error" in capsys.readouterr().err

def test_log_options_passed_to_setup(columns_file, mock_setup_logging, tmp_path):
    log_file = str(tmp_path / "logs" / "rowwise.log")
    main([columns_file, "--log-level", "DEBUG", "--log-file", log_file, "--format", "json"])
    mock_setup_logging.assert_called_once_with("DEBUG", log_file)

def test_module_consoles():
    assert rowwise_cli.error_console.stderr


# --- Malformed tables ---

@pytest.mark.parametrize("payload", [{"name": "abc"}, {"a": 5}, [1, 2], [{"x": 1}, "row"]])
def test_malformed_table_exit_code(tmp_path, capsys, payload):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(payload))
    code = main([str(path), "--mutate", "y=(by-row 1)", "--format", "json"])
    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""
    assert "Input error" in captured.err


# --- Logging ---

def test_cli_logger_comes_from_logging_config():
    assert rowwise_cli.logger.name == "rowwise.scripts.rowwise_cli"

def test_loaded_table_is_logged(columns_file, caplog):
    with caplog.at_level(logging.INFO, logger="rowwise.scripts.rowwise_cli"):
        main([columns_file, "--format", "json"])
    assert "Loaded table" in caplog.text

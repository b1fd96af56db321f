from __future__ import annotations

import logging

from infra.logging_config import setup_logging
from infra.operational_support import TraceIdLogFilter, bind_trace_id, current_trace_id
from infra.path import user_data_dir


def test_bind_trace_id_scopes_the_context():
    assert current_trace_id() is None

    with bind_trace_id("req-test-1") as trace_id:
        assert trace_id == "req-test-1"
        assert current_trace_id() == "req-test-1"
        with bind_trace_id("req-nested") as nested:
            assert current_trace_id() == nested
        assert current_trace_id() == "req-test-1"

    assert current_trace_id() is None


def test_bind_trace_id_generates_an_id_when_missing():
    with bind_trace_id(None) as generated:
        assert generated.startswith("req-")
        assert current_trace_id() == generated


def test_trace_filter_stamps_records():
    record = logging.LogRecord("cost", logging.INFO, __file__, 1, "hello", None, None)

    TraceIdLogFilter().filter(record)
    assert record.trace_id == "-"

    with bind_trace_id("req-abc"):
        TraceIdLogFilter().filter(record)
    assert record.trace_id == "req-abc"


def test_setup_logging_writes_trace_ids_to_rotating_file(tmp_path):
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        log_file = setup_logging(log_dir=tmp_path)
        with bind_trace_id("req-file-check"):
            logging.getLogger("core.services.finance.service").info("Loaded project %s", "p-1")
        for handler in root.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "trace=req-file-check" in content
        assert "Loaded project p-1" in content
        assert log_file.parent == tmp_path
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)


def test_user_data_dir_honours_override(tmp_path, monkeypatch):
    target = tmp_path / "ledger-data"
    monkeypatch.setenv("CM_DATA_DIR", str(target))

    assert user_data_dir() == target
    assert target.is_dir()


def test_setup_logging_defaults_to_logs_under_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("CM_DATA_DIR", str(tmp_path))
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        log_file = setup_logging()
        assert log_file == tmp_path / "logs" / "cost_ledger.log"
        assert log_file.exists()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

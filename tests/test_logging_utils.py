"""
Tests for structured JSON logging.
"""

import io
import json
import logging

from nomis_sync.logging_utils import (
    StructuredJsonFormatter,
    SyncLoggerAdapter,
    configure_structured_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="nomis_sync.sync.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Pushed %d records",
        args=(3,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJsonFormatter:
    def test_basic_fields(self):
        data = json.loads(StructuredJsonFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "nomis_sync.sync.engine"
        assert data["msg"] == "Pushed 3 records"
        assert "ts" in data
        assert "extra" not in data

    def test_run_context_is_top_level(self):
        data = json.loads(
            StructuredJsonFormatter().format(
                make_record(run_id="ab12cd34", mode="full", kind="Note", pushed=3)
            )
        )
        assert data["run_id"] == "ab12cd34"
        assert data["mode"] == "full"
        assert data["kind"] == "Note"
        assert data["extra"] == {"pushed": 3}

    def test_context_keys_come_before_message(self):
        line = StructuredJsonFormatter().format(make_record(run_id="r1"))
        assert list(json.loads(line)) == ["ts", "level", "logger", "run_id", "msg"]

    def test_unserializable_extra_is_stringified(self):
        data = json.loads(StructuredJsonFormatter().format(make_record(target=object())))
        assert data["extra"]["target"].startswith("<object object")

    def test_turkish_text_kept_readable(self):
        record = make_record()
        record.msg = "Senkronizasyon başarılı"
        record.args = ()
        assert "başarılı" in StructuredJsonFormatter().format(record)


class TestSyncLoggerAdapter:
    def test_binds_run_context(self):
        adapter = SyncLoggerAdapter(logging.getLogger("x"), {"run_id": "r1", "mode": "full"})
        _, kwargs = adapter.process("hi", {"extra": {"kind": "Note"}})
        assert kwargs["extra"] == {"kind": "Note", "run_id": "r1", "mode": "full"}


class TestConfigure:
    def test_writes_json_lines_to_stream(self):
        stream = io.StringIO()
        logger = configure_structured_logging(logger_name="nomis_sync.test_a", stream=stream)
        try:
            logger.info("Sync started", extra={"run_id": "r1"})
            data = json.loads(stream.getvalue().strip())
            assert data["run_id"] == "r1"
            assert data["msg"] == "Sync started"
        finally:
            logger.handlers.clear()

    def test_reconfigure_replaces_json_handler(self):
        logger = configure_structured_logging(logger_name="nomis_sync.test_b")
        configure_structured_logging(logger_name="nomis_sync.test_b")
        try:
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        finally:
            logger.handlers.clear()

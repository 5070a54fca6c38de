import logging

import pytest
import structlog
from datalake import logs
from datalake.logs import setup_logging
from datalake.utils import format_file_size, parse_key_value


@pytest.mark.parametrize("size,expected", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (500000, "488.28 KB"),
    (1048576, "1 MB"),
    (2.25 * 1024 ** 3, "2.25 GB"),
    (5 * 1024 ** 5, "5120 TB"),
])
def test_format_file_size(size, expected) -> None:
    assert format_file_size(size) == expected


def test_parse_key_value() -> None:
    assert parse_key_value("source=erp") == ("source", "erp")
    assert parse_key_value("query=a=b") == ("query", "a=b")
    assert parse_key_value("empty=") == ("empty", "")
    with pytest.raises(ValueError):
        parse_key_value("novalue")
    with pytest.raises(ValueError):
        parse_key_value("=value")


def test_setup_logging_is_idempotent(monkeypatch) -> None:
    monkeypatch.setenv("DATALAKE_SUPPRESS_EVENTS", "page_fetched")

    setup_logging(log_level="debug")
    setup_logging(log_level="warning", log_format="dev")

    root = logging.getLogger()
    assert len([h for h in root.handlers if h.get_name() == "datalake"]) == 1
    assert root.level == logging.WARNING

    assert logs.SUPPRESSED_EVENTS == {"page_fetched"}
    with pytest.raises(structlog.DropEvent):
        logs._drop_suppressed(None, "info", {"event": "page_fetched"})

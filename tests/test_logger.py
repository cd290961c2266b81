import logging

from candidkit.codecs.builder import DisplayCodecBuilder
from candidkit.core.logger import (
    configure_root_logger,
    current_trace_id,
    get_logger,
    push_trace_id,
    reset_trace_id,
)
from candidkit.idl import builders as IDL
from candidkit.models.options import DisplayOptions


def test_get_logger_prefixes_namespace():
    assert get_logger("codecs").name == "candidkit.codecs"
    assert get_logger("candidkit.fields").name == "candidkit.fields"
    assert get_logger().name == "candidkit"


def test_configure_root_logger_is_idempotent():
    configure_root_logger("DEBUG")
    configure_root_logger("DEBUG")

    package_logger = logging.getLogger("candidkit")
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG

    DisplayOptions(log_level="WARNING").configure_logging()
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.WARNING


def test_trace_id_push_and_reset():
    assert current_trace_id() == "-"

    token = push_trace_id("trace-123")
    assert current_trace_id() == "trace-123"

    reset_trace_id(token)
    assert current_trace_id() == "-"

    assert push_trace_id(None) is None
    reset_trace_id(None)


def test_builders_log_at_debug(caplog):
    package_logger = logging.getLogger("candidkit")
    package_logger.propagate = True
    try:
        with caplog.at_level(logging.DEBUG, logger="candidkit"):
            DisplayCodecBuilder().build(IDL.Record({"age": IDL.Nat}))
    finally:
        package_logger.propagate = False

    assert "Built display codec for record {age: nat}" in caplog.text

import io
import logging

from document_converter.logger import (
    Timer,
    get_logger,
    get_request_id,
    request_id_var,
    set_request_id,
    setup_logging,
)


def test_extra_data_is_rendered(caplog):
    caplog.set_level(logging.DEBUG, logger="document_converter.test")
    get_logger("document_converter.test").info("Converted", extra_data={"file_name": "a.txt", "rows": 2})
    assert caplog.records[-1].getMessage() == "Converted [file_name=a.txt, rows=2]"


def test_request_id_is_appended(caplog):
    caplog.set_level(logging.DEBUG, logger="document_converter.test")
    token = request_id_var.set("req-1")
    try:
        get_logger("document_converter.test").warning("Degraded")
    finally:
        request_id_var.reset(token)
    assert caplog.records[-1].getMessage() == "Degraded [request_id=req-1]"


def test_caller_extra_data_is_not_mutated(caplog):
    caplog.set_level(logging.DEBUG, logger="document_converter.test")
    extra = {"k": 1}
    token = request_id_var.set("req-2")
    try:
        get_logger("document_converter.test").error("Failed", extra_data=extra)
    finally:
        request_id_var.reset(token)
    assert extra == {"k": 1}


def test_set_request_id_generates_one():
    token = request_id_var.set(None)
    try:
        generated = set_request_id()
        assert generated and get_request_id() == generated
        assert set_request_id("fixed") == "fixed"
    finally:
        request_id_var.reset(token)


def test_setup_logging_writes_to_stream():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    stream = io.StringIO()
    try:
        setup_logging("warning", stream=stream)
        get_logger("document_converter.test").warning("Visible")
        get_logger("document_converter.test").info("Hidden")
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
    output = stream.getvalue()
    assert "WARNING - Visible" in output
    assert "Hidden" not in output


def test_timer_measures_elapsed():
    timer = Timer("noop")
    assert timer.get_elapsed_ms() == 0
    with timer:
        pass
    assert timer.elapsed_ms is not None and timer.elapsed_ms >= 0

# tests/test_logging_utils.py
"""
Tests for concierge.logging_utils
"""

import io
import logging

import pytest

from concierge.logging_utils import configure_logging


def test_configure_logging_rejects_non_int_verbosity():
    with pytest.raises(TypeError, match=r"^verbosity must be int"):
        configure_logging("load")


def test_configure_logging_rejects_bool_verbosity():
    with pytest.raises(TypeError, match=r"^verbosity must be int"):
        configure_logging(True)


def test_configure_logging_rejects_negative_verbosity():
    with pytest.raises(ValueError, match=r"^verbosity must be non-negative"):
        configure_logging(-1)


def test_configure_logging_defaults_to_info_on_stderr(capsys):
    logger = configure_logging(verbosity=0)
    logger.info("hello info")
    logger.debug("hidden debug")

    out, err = capsys.readouterr()
    assert out == ""
    assert "hello info" in err
    assert "hidden debug" not in err


def test_configure_logging_sets_debug_level_at_one(capsys):
    logger = configure_logging(verbosity=1)
    logger.debug("visible debug")

    _, err = capsys.readouterr()
    assert "visible debug" in err


@pytest.mark.parametrize("verbosity", [1, 5])
def test_configure_logging_sets_debug_level(verbosity):
    logger = configure_logging(verbosity=verbosity, stream=io.StringIO())
    assert logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_configure_logging_quiets_http_client_below_debug():
    configure_logging(verbosity=0, stream=io.StringIO())
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


def test_configure_logging_accepts_custom_stream():
    buf = io.StringIO()
    logger = configure_logging(verbosity=0, stream=buf)
    logging.getLogger("concierge.test").warning("routed message")

    assert "routed message" in buf.getvalue()
    assert "WARNING concierge.test: routed message" in buf.getvalue()


def test_configure_logging_does_not_stack_handlers():
    configure_logging(0, stream=io.StringIO())
    buf = io.StringIO()
    root = configure_logging(0, stream=buf)
    plain = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(plain) == 1
    assert plain[0].stream is buf


def test_configure_logging_rejects_bad_stream():
    class NotAStream:
        pass

    with pytest.raises(
        TypeError, match=r"^stream must be file-like \(support .write\(...\)\)"
    ):
        configure_logging(0, stream=NotAStream())

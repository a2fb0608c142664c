"""
Tests for the log line formatter.
"""

import logging

from bookflow.main import ContextFormatter


def _format(**extra) -> str:
    record = logging.LogRecord("bookflow.test", logging.INFO, __file__, 1, "Something happened", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return ContextFormatter("%(levelname)s:%(name)s:%(message)s").format(record)


def test_context_keys_are_appended():
    line = _format(owner_id="user-1", url="/api/bookings", status=502)

    assert line.startswith("INFO:bookflow.test:Something happened | ")
    assert "owner_id=user-1" in line
    assert "url=/api/bookings" in line
    assert "status=502" in line


def test_no_context_leaves_message_alone():
    assert _format() == "INFO:bookflow.test:Something happened"

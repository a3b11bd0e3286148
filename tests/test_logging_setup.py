import logging

import pytest

from tracker.logging_setup import get_logger, parse_level


@pytest.mark.parametrize(
    "level,expected",
    [
        ("DEBUG", logging.DEBUG),
        (" warning ", logging.WARNING),
        ("10", 10),
        ("chatty", logging.INFO),
    ],
)
def test_parse_level(level, expected):
    assert parse_level(level) == expected


def test_get_logger_is_silent_until_configured():
    logger = get_logger("tracker.example")
    assert logger.name == "tracker.example"
    assert logging.getLogger("tracker").handlers

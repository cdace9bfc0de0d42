from __future__ import annotations

import logging
import sys
from typing import Any

import pytest

from waterfall_analytics.logging import DATE_FORMAT, LOG_FORMAT, configure_logging


def test_configure_logging_targets_stderr_with_normalised_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("debug")
    configure_logging(logging.WARNING)

    assert calls[0] == {
        "level": "DEBUG",
        "format": LOG_FORMAT,
        "datefmt": DATE_FORMAT,
        "stream": sys.stderr,
    }
    assert calls[1]["level"] == logging.WARNING

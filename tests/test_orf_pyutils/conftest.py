"""Shared pytest wiring for the orf_pyutils tests."""

from collections.abc import Generator

import pytest

from orf_pyutils.logging import configure_logging


@pytest.hookimpl(wrapper=True, trylast=True)
def pytest_runtest_call(item: pytest.Item) -> Generator[None, None, None]:
    """Rebind the ``json_logs`` sink to the call-phase stderr.

    pytest closes the ``capsys`` stream that was active while fixtures were set up,
    so the sink configured by ``json_logs`` is re-pointed once the test body runs.
    """
    if "json_logs" in getattr(item, "fixturenames", ()):
        configure_logging(level="DEBUG", json_logs=True)
    return (yield)

from __future__ import annotations

import logging

import pytest

from agrimandi.interfaces.http.main import _configure_logging

TOUCHED = ("", "uvicorn", "uvicorn.access", "httpx", "sqlalchemy.engine")


@pytest.fixture(autouse=True)
def restore_levels():
    saved = {name: logging.getLogger(name).level for name in TOUCHED}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.mark.parametrize("level_name", ["DEBUG", "INFO"])
def test_sql_statements_stay_out_of_application_logs(level_name):
    _configure_logging(level_name)

    engine_logger = logging.getLogger("sqlalchemy.engine")
    assert engine_logger.level == logging.WARNING
    assert not engine_logger.isEnabledFor(logging.INFO)


def test_web_libraries_follow_configured_level():
    _configure_logging("debug")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("uvicorn.access").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG

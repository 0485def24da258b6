import logging

import pytest

from ai_changelog.logging_utils import QUIET_LOGGERS, configure_logging, verbosity_to_level


@pytest.fixture
def restore_levels():
    names = ["", *QUIET_LOGGERS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_verbosity_levels():
    assert verbosity_to_level(0) == logging.WARNING
    assert verbosity_to_level(1) == logging.INFO
    assert verbosity_to_level(2) == logging.DEBUG
    assert verbosity_to_level(5) == logging.DEBUG


def test_debug_keeps_third_party_loggers_quiet(restore_levels):
    configure_logging(2)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("ai_changelog.pipeline").isEnabledFor(logging.DEBUG)
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
        assert not logging.getLogger(f"{name}.connectionpool").isEnabledFor(logging.INFO)


def test_default_verbosity_shows_warnings_only(restore_levels):
    configure_logging(0)

    logger = logging.getLogger("ai_changelog.config")
    assert logger.isEnabledFor(logging.WARNING)
    assert not logger.isEnabledFor(logging.INFO)


def test_records_go_to_stderr_not_stdout(restore_levels, capsys):
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    root.handlers[:] = []
    try:
        configure_logging(1)
        logging.getLogger("ai_changelog.pipeline").info("Rendering 3 entries")
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        root.handlers[:] = saved_handlers

    captured = capsys.readouterr()
    assert "INFO ai_changelog.pipeline: Rendering 3 entries" in captured.err
    assert captured.out == ""

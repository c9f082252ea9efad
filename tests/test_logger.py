import logging

from smtp_module.logger import LOG_DATE_FORMAT, LOG_FORMAT, configure_logging, get_logger


def test_get_logger_reuses_existing_logger():
    logger = get_logger("TestLogger")
    handler_count = len(logger.handlers)

    same_logger = get_logger("TestLogger")
    assert logger is same_logger
    assert len(same_logger.handlers) == handler_count


def test_configure_logging_sets_level_and_format(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("debug")

    assert calls == [
        {"level": logging.DEBUG, "format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT, "force": True}
    ]


def test_configure_logging_unknown_level_falls_back_to_info(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("chatty")

    assert calls[0]["level"] == logging.INFO

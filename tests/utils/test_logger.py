import logging
from logging.handlers import TimedRotatingFileHandler

from news_client.utils.logger import LOG_FILE_NAME, LOGGER_NAME, get_logger, setup_logging


def test_setup_logging_writes_to_rotating_file(tmp_path):
    logger = setup_logging(log_level=logging.DEBUG, log_dir=str(tmp_path))
    try:
        get_logger(f"{LOGGER_NAME}.tests").debug("hello from tests")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert any(isinstance(h, TimedRotatingFileHandler) for h in logger.handlers)
        assert "hello from tests" in (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    setup_logging(log_dir=str(tmp_path))
    logger = setup_logging(log_dir=str(tmp_path))
    try:
        assert len(logger.handlers) == 2
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.DEBUG)


def test_level_names_are_accepted(tmp_path):
    logger = setup_logging(log_level="warning", log_dir=str(tmp_path))
    try:
        assert logger.level == logging.WARNING
        assert setup_logging(log_level="nonsense", log_dir=str(tmp_path)).level == logging.INFO
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.DEBUG)

import logging

import pytest
from meal_scheduler.log import setup_logging


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("meal_scheduler")
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_console_level(self):
        logger = setup_logging(level="warning")
        assert logger.name == "meal_scheduler"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_log_file_records_debug(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging(level="error", log_file=log_file)
        logging.getLogger("meal_scheduler.planner").debug("phase trace")
        for h in logger.handlers:
            h.flush()
        assert "phase trace" in log_file.read_text()
        assert logger.handlers[0].level == logging.ERROR

    def test_repeat_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

"""Logger namespace and repeated setup."""

import logging

from worldline.logging import LOG_FORMAT, get_logger, setup_logging


class TestLogging:

    def test_area_loggers_share_the_namespace(self):
        assert get_logger('services.temporal').name == 'worldline.services.temporal'

    def test_setup_is_idempotent(self):
        root = setup_logging()
        count = len(root.handlers)
        assert setup_logging(debug=True) is root
        assert len(root.handlers) == count
        assert root.level == logging.DEBUG
        assert any(h.formatter is not None and h.formatter._fmt == LOG_FORMAT for h in root.handlers)

    def test_chatty_libraries_are_quieted(self):
        setup_logging()
        assert logging.getLogger('aiosqlite').level == logging.WARNING

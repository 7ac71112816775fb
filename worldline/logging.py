"""
Logging for the Worldline API.

Every module logs under the ``worldline`` namespace. ``setup_logging`` attaches
one stdout handler to that namespace and can be called again (each app
lifespan does) without stacking handlers.
"""

import logging
import sys

ROOT_LOGGER = 'worldline'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS = ('aiosqlite', 'engineio.server', 'socketio.server')


def _is_worldline_handler(handler: logging.Handler) -> bool:
    return getattr(handler, '_worldline', False)


def setup_logging(debug: bool = False) -> logging.Logger:
    """
    Configure the ``worldline`` logger tree.

    :param debug: Log at DEBUG instead of INFO
    :return: The ``worldline`` logger
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    if not any(_is_worldline_handler(h) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._worldline = True
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for one area of the app, e.g. ``get_logger('services.temporal')``."""
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')

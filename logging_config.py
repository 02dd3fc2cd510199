import logging

from settings import VALID_LOG_LEVELS

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Send all records to stderr through a single handler on the root logger.
    Calling it again replaces the handler instead of stacking a second one.
    """
    level = level.upper()
    if level not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

# Standard library imports
import logging


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that are too chatty at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "kafka", "alembic")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the service.

    Args:
        level: Log level name (e.g. "DEBUG", "INFO")
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

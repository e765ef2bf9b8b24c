import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stdout handler on the package logger; safe to call repeatedly."""
    logger = logging.getLogger("finance_coach")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if any(getattr(handler, "_finance_coach", False) for handler in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._finance_coach = True
    logger.addHandler(handler)

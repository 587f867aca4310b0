# logging_setup.py
# One-time logging configuration for the Streamlit entry point
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger (idempotent across reruns)"""
    logger = logging.getLogger("badgeviewer")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if any(getattr(h, "_badgeviewer", False) for h in logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._badgeviewer = True
    logger.addHandler(handler)
    logger.propagate = False

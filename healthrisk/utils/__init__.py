"""
Shared utilities.
"""
import logging
import sys

ROOT_LOGGER_NAME = "healthrisk"

_configured = False


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stdout handler to the package root logger."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper())

    # If no handlers exist, add one (avoid duplicate logs)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        root.addHandler(handler)

    root.propagate = False  # Prevent duplicate uvicorn logs
    _configured = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a module logger under the package root logger."""
    if not _configured:
        configure_logging()
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)

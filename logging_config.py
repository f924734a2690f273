# logging_config.py
"""
Logging setup for the formulation service.
Console output always; rotating file log when FEED_LOG_DIR is set.
"""
import logging
import logging.handlers
import os
from pathlib import Path

SIMPLE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
DETAILED_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(funcName)s | %(message)s"


def setup_logging(level=None, log_dir=None):
    """
    Configure the root logger once.

    Args:
        level: Level name (default env FEED_LOG_LEVEL or INFO)
        log_dir: Directory for formulation.log (default env FEED_LOG_DIR, None = console only)

    Returns:
        The root logger
    """
    level = (level or os.getenv("FEED_LOG_LEVEL", "INFO")).upper()
    log_dir = log_dir or os.getenv("FEED_LOG_DIR")

    root = logging.getLogger()
    # File log keeps per-ingredient allocation detail
    root.setLevel(logging.DEBUG if log_dir else level)

    # Clear existing handlers to avoid duplicates on reload
    root.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
    root.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path / "formulation.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        root.addHandler(file_handler)

    return root

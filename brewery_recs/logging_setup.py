from __future__ import annotations

import logging

from .config import AppConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config: AppConfig) -> None:
    """Install the root handler once, at process start."""
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

"""Logging setup for the API process."""

import logging
from typing import Optional

from gigit.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once. Safe to call again (e.g. on reload)."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    logging.getLogger("gigit").setLevel(level_name)

    # SQL echo is noisy; only surface it in debug mode
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

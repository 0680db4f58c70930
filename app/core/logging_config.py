"""Logging setup shared by the API process and scripts."""

import logging
import sys

from app.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> logging.Logger:
    """Configure root logging once and return the application logger.

    Safe to call repeatedly; handlers are only attached on the first call.
    """
    root = logging.getLogger()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root.setLevel(level)

    if not any(getattr(h, "_stressless", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._stressless = True
        root.addHandler(handler)

    # SQL echo is controlled by SQL_DEBUG; keep the engine logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.sql_debug else logging.WARNING
    )
    # Provider SDKs are chatty at INFO
    for noisy in ("httpx", "openai", "google_genai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("app")

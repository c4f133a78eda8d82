"""
Logging setup. Application loggers live under "chessview.<area>" (services.relay,
tasks.resume_parse, api.export, ...) and log key=value pairs.
"""
import logging
import sys

from chessview.app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# httpx logs every OpenAI request at INFO; pdfminer (under pdfplumber) is chatty at DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "pdfminer")


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the stdout handler once and return the "chessview" logger."""
    level_val = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level_val,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_val, logging.WARNING))
    app_logger = logging.getLogger("chessview")
    app_logger.setLevel(level_val)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"chessview.{name}")

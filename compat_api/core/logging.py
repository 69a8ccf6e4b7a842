"""Logging configuration

Development gets Rich console output; every other environment logs plain
single-line records, which is what the hosting log collector ingests.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from compat_api.core.config import Settings

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "discord": logging.WARNING,
}


def _rich_handler() -> logging.Handler:
    handler = RichHandler(
        console=Console(force_terminal=True, width=120),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt=f"[{DATE_FORMAT}]"))
    return handler


def _plain_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=PLAIN_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(settings: Settings) -> None:
    """Install the root handler for the current environment"""
    level = getattr(logging, settings.log_level, logging.INFO)

    fallback_reason = None
    if settings.is_development:
        try:
            handler = _rich_handler()
        except Exception as e:
            fallback_reason = str(e)
            handler = _plain_handler()
    else:
        handler = _plain_handler()

    # uvicorn configures the root logger before the app is created
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(noisy_level, level))

    logger = logging.getLogger(__name__)
    if fallback_reason:
        logger.warning(f"Rich logging setup failed: {fallback_reason}, using plain logging")
    logger.info(f"Logging: {settings.log_level} | Env: {settings.environment}")

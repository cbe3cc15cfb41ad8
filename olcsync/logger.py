"""Configuración de logging y helpers."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "olcsync"

_handler: Optional[RichHandler] = None


def configure_logging(level: str = "WARNING", console: Optional[Console] = None) -> logging.Logger:
    """
    Instala un RichHandler en el logger raíz de olcsync.

    Idempotente: llamar varias veces solo ajusta el nivel y la consola.
    """
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    logger.propagate = False

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    _handler.setLevel(level.upper())
    logger.addHandler(_handler)
    return logger

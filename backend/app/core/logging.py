"""Configuración mínima de logging para el proceso."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HANDLER_NAME = "job-tracker-console"


def configure_logging(level: str = "INFO") -> None:
    """Instala un único handler de consola en el logger raíz.

    Se puede llamar varias veces (p.ej. desde uvicorn y desde el lifespan)
    sin duplicar líneas en la salida.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

"""Enumeraciones compartidas por el planificador de limpieza."""

from enum import Enum


class CleanupTrigger(str, Enum):
    """Origen de una pasada de limpieza (se usa en los logs)."""

    STARTUP = "initial"
    SCHEDULED = "scheduled"
    MANUAL = "manual"

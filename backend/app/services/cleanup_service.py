from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.models.job import utc_now
from app.services.job_service import JobService
from app.services.retention import DEFAULT_RETENTION, is_expired

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """
    Borra los jobs cuya hora estimada de fin quedó atrás hace más de
    `retention` (24 h por defecto).

    La hora actual se lee una única vez por barrido, así todos los jobs se
    evalúan contra el mismo instante aunque la pasada sea lenta.
    """

    def __init__(
        self,
        job_service: JobService,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.job_service = job_service
        self.retention = retention
        self.clock = clock

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Ejecuta un barrido y devuelve cuántos jobs se borraron."""
        if now is None:
            now = self.clock()

        removed = self.job_service.remove_where(
            lambda job: is_expired(job, now, self.retention)
        )

        for job in removed:
            logger.info("Deleting expired job: %s (%s)", job.name, job.id)

        if removed:
            logger.info(
                "Cleanup complete: %d jobs deleted",
                len(removed),
                extra={"action": "cleanup", "removed": len(removed)},
            )
        return len(removed)

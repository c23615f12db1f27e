"""Planificador del barrido de retención.

Lanza un barrido al arrancar, luego otro cada `interval` mientras viva el
proceso, y permite dispararlo a mano desde la API. El barrido en sí es
síncrono (toma el lock del almacén), así que la tarea periódica lo ejecuta
en un hilo con `asyncio.to_thread` para no bloquear el event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import Optional

from app.core.enums import CleanupTrigger
from app.services.cleanup_service import RetentionSweeper

logger = logging.getLogger(__name__)


class CleanupScheduler:
    def __init__(
        self,
        sweeper: RetentionSweeper,
        interval: timedelta = timedelta(hours=1),
    ) -> None:
        self.sweeper = sweeper
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Future] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self, trigger: CleanupTrigger) -> int:
        """Barrido síncrono; los errores se registran y nunca se propagan."""
        logger.info("Running %s cleanup...", trigger.value)
        try:
            return self.sweeper.sweep()
        except Exception:
            logger.exception("Cleanup (%s) failed", trigger.value)
            return 0

    def trigger(self) -> int:
        """Barrido manual bajo demanda (endpoint `POST /api/cleanup`)."""
        return self.run_once(CleanupTrigger.MANUAL)

    async def start(self, run_immediately: bool = True) -> None:
        """Barrido inicial y arranque de la tarea periódica."""
        if self.running:
            return
        if run_immediately:
            await asyncio.to_thread(self.run_once, CleanupTrigger.STARTUP)
        self._task = asyncio.create_task(self._run_forever(), name="retention-cleanup")
        logger.info("Auto-cleanup scheduled every %s", self.interval)

    async def stop(self) -> None:
        """Cancela el temporizador y espera al barrido en curso, si lo hay."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        inflight, self._inflight = self._inflight, None
        if inflight is not None and not inflight.done():
            await inflight

    async def _run_forever(self) -> None:
        seconds = self.interval.total_seconds()
        while True:
            await asyncio.sleep(seconds)
            # Cada tick es independiente: run_once ya absorbe los errores
            self._inflight = asyncio.ensure_future(
                asyncio.to_thread(self.run_once, CleanupTrigger.SCHEDULED)
            )
            await asyncio.shield(self._inflight)

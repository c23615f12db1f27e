"""Cálculo de la hora estimada de fin y de la caducidad de un job.

Funciones puras: no leen el reloj ni tocan el almacén. La hora actual se
recibe como parámetro para que el barrido pueda fijarla una sola vez.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from app.models.job import Job

DEFAULT_RETENTION = timedelta(hours=24)


def total_minutes(job: Job) -> int:
    """Duración total estimada: segmentos más retrasos, en minutos."""
    segment_minutes = sum(segment.duration for segment in job.segments)
    delay_minutes = sum(delay.minutes for delay in job.delays or [])
    return segment_minutes + delay_minutes


def estimate_end_time(job: Job) -> Optional[datetime]:
    """Hora estimada de fin, o None si el job aún no ha empezado.

    También es None cuando la suma se sale del rango de `datetime`: un job
    así no tiene fin calculable y nunca caduca.
    """
    if job.start_time is None:
        return None
    try:
        return job.start_time + timedelta(minutes=total_minutes(job))
    except OverflowError:
        return None


def deletion_time(job: Job, retention: timedelta = DEFAULT_RETENTION) -> Optional[datetime]:
    """Momento a partir del cual el job puede borrarse."""
    end_time = estimate_end_time(job)
    if end_time is None:
        return None
    try:
        return end_time + retention
    except OverflowError:
        return None


def is_expired(
    job: Job,
    now: datetime,
    retention: timedelta = DEFAULT_RETENTION,
) -> bool:
    """True si `now` ya alcanzó la hora de borrado (límite incluido)."""
    when = deletion_time(job, retention)
    if when is None:
        return False
    return now >= when

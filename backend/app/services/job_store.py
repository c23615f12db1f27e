"""Instancias globales del almacén de Jobs y de la limpieza.

No hay base de datos: exponemos una única instancia de `JobService` que vive
mientras el proceso está en marcha, junto con el barrido de retención y su
planificador. Así los routers y el lifespan comparten el mismo estado sin
requerir inyección de dependencias.
"""

from app.core.config import get_settings
from app.services.cleanup_service import RetentionSweeper
from app.services.job_service import JobService
from app.services.scheduler import CleanupScheduler

settings = get_settings()

# Instancia global única para toda la app
job_service = JobService(settings.store_path)
retention_sweeper = RetentionSweeper(job_service, retention=settings.retention_window)
cleanup_scheduler = CleanupScheduler(retention_sweeper, interval=settings.cleanup_interval)

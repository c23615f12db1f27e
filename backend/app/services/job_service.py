"""Almacén de Jobs en memoria con persistencia en un fichero JSON.

Esta clase es la única dueña del diccionario de jobs. Todas las lecturas y
escrituras pasan por un mismo `RLock`, de modo que las peticiones HTTP (que
FastAPI ejecuta en su pool de hilos) y el barrido periódico nunca se pisan.
Hacia fuera siempre se entregan copias, nunca los objetos internos.

El fichero se reescribe entero al final de cada operación que modifica el
almacén, primero en un temporal y luego con `os.replace`, así que nunca
queda a medio escribir.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from app.core.errors import JobAlreadyExistsError, LoadError, PersistenceError
from app.models.job import Job, JobStoreDocument, utc_now

logger = logging.getLogger(__name__)


class JobService:
    """
    Gestión de jobs: diccionario en memoria + fichero JSON en disco.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = utc_now) -> None:
        self.path = Path(path)
        self.clock = clock
        self._lock = threading.RLock()
        self._jobs: Dict[str, Job] = {}
        self.load()

    # ---------- PERSISTENCIA ----------

    def load(self) -> None:
        """Carga el fichero; si falta o está corrupto se empieza vacío."""
        with self._lock:
            try:
                self._jobs = self._read_document()
            except LoadError:
                logger.exception("Error loading jobs from %s, starting empty", self.path)
                self._jobs = {}
            logger.info("Loaded %d jobs from %s", len(self._jobs), self.path)

    def persist(self) -> bool:
        """Escribe todos los jobs en disco.

        Un fallo de escritura se registra pero no deshace los cambios en
        memoria; devuelve False en ese caso.
        """
        with self._lock:
            try:
                self._write_document()
            except PersistenceError:
                logger.exception("Error saving jobs to %s", self.path)
                return False
            return True

    def _read_document(self) -> Dict[str, Job]:
        if not self.path.exists():
            logger.info("No job store at %s yet", self.path)
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise LoadError(str(e)) from e

        if not isinstance(raw, dict):
            raise LoadError(f"Unexpected document type: {type(raw).__name__}")

        # Formato antiguo: el documento es directamente {id: job}
        records = raw.get("jobs", {}) if "schemaVersion" in raw else raw
        if not isinstance(records, dict):
            raise LoadError("'jobs' must be a mapping")

        jobs: Dict[str, Job] = {}
        for job_id, record in records.items():
            if not isinstance(record, dict):
                logger.warning("Skipping malformed job %s", job_id)
                continue
            try:
                job = Job.model_validate({**record, "id": job_id})
            except ValidationError:
                logger.warning("Skipping malformed job %s", job_id, exc_info=True)
                continue
            jobs[job.id] = job
        return jobs

    def _write_document(self) -> None:
        document = JobStoreDocument(jobs=self._jobs)
        payload = json.dumps(document.model_dump(mode="json", by_alias=True), indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(str(e)) from e

    # ---------- CRUD ----------

    def list_jobs(self) -> Dict[str, Job]:
        """Todos los jobs indexados por id (copias)."""
        with self._lock:
            return {job_id: job.model_copy(deep=True) for job_id, job in self._jobs.items()}

    def get_job(self, job_id: str) -> Optional[Job]:
        """Devuelve un job por id o None si no existe."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job is not None else None

    def create_job(self, job: Job) -> Job:
        """Guarda un job nuevo. Falla si el id ya existe."""
        with self._lock:
            if job.id in self._jobs:
                raise JobAlreadyExistsError(job.id)
            stored = job.model_copy(deep=True, update={"last_updated": self.clock()})
            self._jobs[stored.id] = stored
            self.persist()
            return stored.model_copy(deep=True)

    def update_job(self, job_id: str, job: Job) -> Optional[Job]:
        """Sustituye el job entero; None si no existe."""
        with self._lock:
            if job_id not in self._jobs:
                return None
            # El id no cambia nunca, aunque el cuerpo traiga otro
            stored = job.model_copy(
                deep=True, update={"id": job_id, "last_updated": self.clock()}
            )
            self._jobs[job_id] = stored
            self.persist()
            return stored.model_copy(deep=True)

    def delete_job(self, job_id: str) -> bool:
        with self._lock:
            if self._jobs.pop(job_id, None) is None:
                return False
            self.persist()
            return True

    def remove_where(self, predicate: Callable[[Job], bool]) -> List[Job]:
        """Borra en bloque los jobs que cumplen `predicate`.

        Primero se evalúan todos los jobs y después se borran juntos, con una
        sola escritura al final si se eliminó algo. Un job cuyo `predicate`
        falla se registra y se conserva. Devuelve los jobs borrados.
        """
        with self._lock:
            matched: List[str] = []
            for job_id, job in list(self._jobs.items()):
                try:
                    if predicate(job):
                        matched.append(job_id)
                except Exception:
                    logger.exception("Could not evaluate job %s, keeping it", job_id)

            removed = [self._jobs.pop(job_id) for job_id in matched]
            if removed:
                self.persist()
            return removed

    def reset(self, jobs: Optional[List[Job]] = None) -> None:
        """Sustituye el contenido en memoria por `jobs` sin escribir en disco.

        Útil para sembrar el almacén o vaciarlo; la próxima operación que
        modifique algo persistirá el nuevo contenido.
        """
        with self._lock:
            self._jobs = {job.id: job.model_copy(deep=True) for job in jobs or []}

    def count(self) -> int:
        with self._lock:
            return len(self._jobs)

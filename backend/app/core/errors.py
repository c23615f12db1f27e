"""Errores propios del almacén de jobs.

Los errores de lectura y escritura del fichero nunca llegan al cliente:
`JobService` los captura, los registra en el log y sigue trabajando con el
estado en memoria. Sólo `JobAlreadyExistsError` cruza hasta el router.
"""


class JobStoreError(Exception):
    """Base para todos los errores del almacén."""


class PersistenceError(JobStoreError):
    """No se pudo escribir el fichero de jobs (disco lleno, permisos...)."""


class LoadError(JobStoreError):
    """El fichero de jobs existe pero no se puede leer o no es JSON válido."""


class JobAlreadyExistsError(JobStoreError):
    """Se intentó crear un job con un id que ya está en el almacén."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job already exists: {job_id}")
        self.job_id = job_id

"""Definición del modelo de datos de un Job.

Un job es un trabajo planificado: una hora de inicio, una lista ordenada de
segmentos con su duración en minutos y, opcionalmente, retrasos que alargan
la hora estimada de fin. En JSON los campos van en camelCase (`startTime`,
`lastUpdated`) porque así los envía el frontend; en Python usamos
snake_case gracias a los alias de Pydantic.

Cualquier campo extra que mande el cliente se conserva tal cual, ya que el
almacén guarda el registro completo.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCHEMA_VERSION = 1


def utc_now() -> datetime:
    """Hora actual con zona horaria UTC."""
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Las fechas sin zona horaria se interpretan como UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Segment(BaseModel):
    """Tramo planificado de un job."""

    duration: int = 0  # minutos

    model_config = ConfigDict(extra="allow")


class Delay(BaseModel):
    """Retraso añadido a la estimación de fin (p.ej. una interrupción)."""

    minutes: int = 0

    model_config = ConfigDict(extra="allow")


class JobPayload(BaseModel):
    """Cuerpo aceptado por los endpoints de creación y actualización.

    El `id` es opcional aquí porque en un `PUT` lo manda la ruta; al crear
    se comprueba su presencia construyendo un `Job`.
    """

    id: Optional[str] = None
    name: str = ""
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    segments: List[Segment] = Field(default_factory=list)
    delays: Optional[List[Delay]] = None
    # Lo estampa el almacén; si el cliente lo manda se ignora
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("start_time", "last_updated", mode="before")
    @classmethod
    def _empty_string_is_none(cls, value):
        if value == "":
            return None
        return value

    @field_validator("start_time", "last_updated")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @field_validator("segments", mode="before")
    @classmethod
    def _null_segments(cls, value):
        return [] if value is None else value


class Job(JobPayload):
    """Registro completo tal y como vive en el almacén."""

    id: str

    def to_record(self) -> dict:
        """Representación JSON del job (la que se guarda y se devuelve)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_payload(cls, payload: JobPayload, job_id: Optional[str] = None) -> "Job":
        """Construye un `Job` a partir del cuerpo recibido.

        Si se pasa `job_id` (caso `PUT`) manda sobre el `id` del cuerpo.
        `lastUpdated` siempre se descarta; lo pone el almacén.
        """
        data = payload.model_dump(exclude={"id", "last_updated"})
        return cls(**data, id=job_id if job_id is not None else payload.id)


class JobStoreDocument(BaseModel):
    """Documento que se escribe en disco con todos los jobs."""

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    jobs: Dict[str, Job] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

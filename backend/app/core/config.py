"""Configuración del servicio de jobs.

Usa `pydantic-settings` para leer desde `.env` o variables de entorno el
puerto de escucha, la ubicación del fichero JSON donde se guardan los jobs
y la política de retención: cada cuánto se ejecuta el barrido y cuánto
tiempo se conserva un job después de su hora estimada de fin.
"""

import json
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Contenedor tipado para todas las opciones configurables."""

    app_name: str = "Job Tracker API"
    environment: str = "development"

    # Dirección y puerto en los que escucha uvicorn
    host: str = "0.0.0.0"
    port: int = 3000

    # Directorio y nombre del fichero JSON donde se persisten los jobs
    data_dir: Path = Path("data")
    store_filename: str = "jobs.json"

    # Política de retención: cada cuánto se barre y cuánto se conserva un job
    # después de su hora estimada de fin. Acepta segundos o ISO 8601 (PT1H).
    cleanup_interval: timedelta = timedelta(hours=1)
    retention_window: timedelta = timedelta(hours=24)

    # CORS: `ALLOWED_ORIGINS` admite lista JSON o valores separados por comas
    allowed_origins: Annotated[list[str], NoDecode] = ["*"]
    allow_credentials: bool = False

    log_level: str = "INFO"

    # Le indicamos a Pydantic que lea automáticamente las variables de entorno
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if not isinstance(value, str):
            return value
        if value.strip().startswith("["):
            return json.loads(value)
        return [s.strip() for s in value.split(",") if s.strip()]

    @property
    def store_path(self) -> Path:
        """Ruta completa del fichero de persistencia."""
        return self.data_dir / self.store_filename


@lru_cache
def get_settings() -> Settings:
    """Configuración del proceso, construida una sola vez.

    El almacén global, el barrido y el planificador se crean a partir de
    esta instancia al importar `app.services.job_store`.
    """
    return Settings()

"""
Configuración de olcsync.

Todo se resuelve desde variables de entorno OLCSYNC_* (la CLI carga antes el .env del
directorio actual). El core NO lee ficheros; solo expone rutas y valores.
"""

import os
import socket
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from olcsync.core.errors import ConfigError

ENV_PREFIX = "OLCSYNC_"

# Ruta canónica del catálogo deseado
DEFAULT_CATALOG = Path("/etc/olcsync/databases.yaml")

ReadMode = Literal["slapcat", "ldapsearch"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Valores de ejecución (inmutables durante una corrida)."""

    model_config = ConfigDict(frozen=True)

    catalog: Path = Field(DEFAULT_CATALOG, description="YAML con las bases de datos deseadas")
    ldap_uri: str = Field("ldapi:///", description="URI para ldapmodify/ldapsearch (SASL EXTERNAL)")
    read_mode: ReadMode = Field("slapcat", description="slapcat | ldapsearch")
    command_timeout: float = Field(30.0, gt=0, description="Timeout por comando externo (segundos)")
    host_id: str = Field(default_factory=socket.getfqdn, description="Contexto/sal del hash de contraseñas")
    packages_file: Optional[Path] = Field(None, description="YAML que sustituye la tabla OS → paquetes")
    log_level: str = Field("WARNING", description="Nivel de logging")

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"nivel desconocido: {v} (usa {', '.join(_LOG_LEVELS)})")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Construye Settings a partir de OLCSYNC_CATALOG, OLCSYNC_LDAP_URI, OLCSYNC_READ_MODE,
    OLCSYNC_COMMAND_TIMEOUT, OLCSYNC_HOST_ID, OLCSYNC_PACKAGES_FILE y OLCSYNC_LOG_LEVEL.
    Variables vacías se ignoran.
    """
    env = os.environ if environ is None else environ
    values = {}
    for field in Settings.model_fields:
        raw = env.get(ENV_PREFIX + field.upper(), "").strip()
        if raw:
            values[field] = raw
    try:
        return Settings(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Configuración inválida en variables {ENV_PREFIX}*: {e}") from e

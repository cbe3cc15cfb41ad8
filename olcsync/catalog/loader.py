"""
Loader del catálogo declarativo
Carga el YAML de bases de datos deseadas y lo convierte a DesiredEntry
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from olcsync.core.errors import ConfigError, ValidationError
from olcsync.core.resource.models import DesiredEntry, Ensure


class DatabaseConfig(BaseModel):
    """Una base de datos en el catálogo (databases.yaml)"""
    model_config = ConfigDict(extra="forbid", use_enum_values=False)

    suffix: str = Field("", description="Sufijo de la base (ej: dc=example,dc=com)")
    ensure: Ensure = Field(Ensure.PRESENT, description="present | absent")
    backend: Optional[str] = Field(None, description="bdb | hdb | mdb")
    directory: Optional[str] = Field(None, description="Directorio de la base (olcDbDirectory)")
    rootdn: Optional[str] = Field(None, description="DN administrador (olcRootDN)")
    rootpw: Optional[str] = Field(None, description="Contraseña en claro o ya con esquema ({SSHA}...)")
    readonly: Optional[bool] = Field(None, description="olcReadOnly")
    dbmaxsize: Optional[int] = Field(None, description="olcDbMaxSize en bytes")

    def to_entry(self) -> DesiredEntry:
        attributes: Dict[str, Any] = self.model_dump(exclude={"suffix", "ensure"}, exclude_none=True)
        return DesiredEntry(name=self.suffix, ensure=self.ensure, attributes=attributes)


class CatalogFile(BaseModel):
    """Raíz del catálogo"""
    model_config = ConfigDict(extra="forbid")

    version: int = Field(1, description="Versión del esquema")
    databases: List[DatabaseConfig] = Field(default_factory=list)


class CatalogLoader:
    """Carga y valida el catálogo de bases de datos deseadas"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise ConfigError(f"Catálogo no encontrado: {self.path}")
        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Error al parsear YAML {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"No se pudo leer {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path}: la raíz debe ser un mapeo con 'databases:'")
        return data

    def load(self) -> CatalogFile:
        data = self.load_raw()
        try:
            return CatalogFile(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"{self.path}: catálogo inválido:\n{e}") from e

    def entries(self) -> List[DesiredEntry]:
        """Entradas deseadas en el orden del catálogo."""
        return [db.to_entry() for db in self.load().databases]

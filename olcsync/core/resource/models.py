"""
Modelos de datos de una corrida de reconciliación.

- DesiredEntry: lo que declara el catálogo (solo lectura para el core)
- ActualRecord: lo que el discovery observa en el sistema ahora mismo
- CacheEntry: unión de ambos por identidad; vive una sola corrida
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from olcsync.core.resource.schema import ResourceDescriptor


class Ensure(str, Enum):
    """Estado de existencia deseado u observado"""
    PRESENT = "present"
    ABSENT = "absent"


class MatchState(str, Enum):
    """Estado inicial de una entrada tras el prefetch"""
    UNMATCHED = "unmatched"
    IN_SYNC = "matched-in-sync"
    OUT_OF_SYNC = "matched-out-of-sync"


class DesiredEntry(BaseModel):
    """Instancia declarada en el catálogo"""
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    name: str = Field(..., description="Valor de la identidad (ej: dc=example,dc=com)")
    ensure: Ensure = Field(Ensure.PRESENT, description="present | absent")
    attributes: Dict[str, str] = Field(
        default_factory=dict,
        description="Solo las propiedades fijadas explícitamente",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("attributes", mode="before")
    @classmethod
    def stringify(cls, v):
        """YAML puede traer bool/int (readonly: true, dbmaxsize: 1048576)."""
        if not isinstance(v, dict):
            return v
        out = {}
        for key, value in v.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "TRUE" if value else "FALSE"
            out[str(key)] = str(value)
        return out

    def effective_attributes(self, descriptor: ResourceDescriptor) -> Dict[str, str]:
        """Atributos explícitos + defaults declarados."""
        return descriptor.with_defaults(self.attributes)


@dataclass
class ActualRecord:
    """Instancia descubierta en el sistema gestionado"""
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    dn: Optional[str] = None
    ensure: Ensure = Ensure.PRESENT


@dataclass
class CacheEntry:
    """
    Une una entrada deseada con su registro real (si lo hay).
    ensure/attributes/dn reflejan el estado tras cada escritura de la corrida.
    """
    desired: DesiredEntry
    actual: Optional[ActualRecord] = None
    ensure: Ensure = Ensure.ABSENT
    attributes: Dict[str, str] = field(default_factory=dict)
    dn: Optional[str] = None

    @classmethod
    def bind(cls, desired: DesiredEntry, actual: Optional[ActualRecord]) -> "CacheEntry":
        if actual is None:
            return cls(desired=desired)
        return cls(
            desired=desired,
            actual=actual,
            ensure=actual.ensure,
            attributes=dict(actual.attributes),
            dn=actual.dn,
        )

    @property
    def name(self) -> str:
        return self.desired.name

    @property
    def matched(self) -> bool:
        return self.actual is not None

    def exists(self) -> bool:
        return self.ensure == Ensure.PRESENT

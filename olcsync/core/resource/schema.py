"""
Esquema de recursos: forma de una entidad gestionable.

Un ResourceDescriptor se construye una vez al arrancar y no cambia. A partir de él se
derivan la tabla de accesores (nombre → getter) y el mapa atributo LDAP → propiedad
que usa el parser para reconocer líneas.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from olcsync.core.errors import ValidationError


@dataclass(frozen=True)
class PropertySpec:
    """Definición de una propiedad gestionable"""
    attribute: str  # nombre del atributo en cn=config (ej: olcDbDirectory)
    allowed_values: Optional[FrozenSet[str]] = None  # None => sin restricción
    default: Optional[str] = None
    mutable: bool = True
    secret: bool = False  # se enmascara en logs y salida
    transform: bool = False  # el valor deseado pasa por el helper de transformación

    def allows(self, value: str) -> bool:
        return self.allowed_values is None or value in self.allowed_values


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Definición de un tipo de recurso: identidad + propiedades.

    Invariantes:
      - exactamente una identidad (identity_key), con su propio atributo
      - la identidad nunca es una propiedad mutable
    """
    kind: str
    identity_key: str
    identity_attribute: str
    properties: Tuple[Tuple[str, PropertySpec], ...] = ()
    _accessors: Dict[str, Callable[[Mapping[str, Any]], Optional[str]]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        names = [name for name, _ in self.properties]
        if not self.identity_key:
            raise ValidationError(f"{self.kind}: falta la clave de identidad")
        if self.identity_key in names:
            raise ValidationError(
                f"{self.kind}: la identidad '{self.identity_key}' no puede ser una propiedad"
            )
        if len(set(names)) != len(names):
            raise ValidationError(f"{self.kind}: propiedades duplicadas en el descriptor")
        attributes = [spec.attribute.lower() for _, spec in self.properties]
        attributes.append(self.identity_attribute.lower())
        if len(set(attributes)) != len(attributes):
            raise ValidationError(f"{self.kind}: dos propiedades usan el mismo atributo")

        # Tabla de accesores explícita (sin getters generados)
        for name in names:
            self._accessors[name] = _make_getter(name)

    # ---------- consultas ----------

    @property
    def property_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.properties)

    def spec(self, name: str) -> PropertySpec:
        for prop, spec in self.properties:
            if prop == name:
                return spec
        raise ValidationError(f"{self.kind}: propiedad desconocida '{name}'")

    def accessors(self) -> Dict[str, Callable[[Mapping[str, Any]], Optional[str]]]:
        """Nombre de propiedad → getter sobre un mapeo de atributos."""
        return dict(self._accessors)

    def attribute_map(self) -> Dict[str, str]:
        """
        Atributo LDAP (en minúsculas) → propiedad.
        Incluye la identidad; define las líneas que el parser reconoce.
        """
        out = {self.identity_attribute.lower(): self.identity_key}
        for name, spec in self.properties:
            out[spec.attribute.lower()] = name
        return out

    def defaults(self) -> Dict[str, str]:
        return {name: spec.default for name, spec in self.properties if spec.default is not None}

    def with_defaults(self, attributes: Mapping[str, Optional[str]]) -> Dict[str, str]:
        """Aplica los defaults declarados a las propiedades no fijadas."""
        out = self.defaults()
        out.update({k: v for k, v in attributes.items() if v is not None})
        return out

    def secret_names(self) -> FrozenSet[str]:
        return frozenset(name for name, spec in self.properties if spec.secret)


def _make_getter(name: str) -> Callable[[Mapping[str, Any]], Optional[str]]:
    def getter(attributes: Mapping[str, Any]) -> Optional[str]:
        return attributes.get(name)
    getter.__name__ = f"get_{name}"
    return getter


def mask(descriptor: ResourceDescriptor, attributes: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
    """Copia de los atributos con los secretos enmascarados (para logs y CLI)."""
    secrets = descriptor.secret_names()
    return {k: ("********" if k in secrets and v else v) for k, v in attributes.items()}

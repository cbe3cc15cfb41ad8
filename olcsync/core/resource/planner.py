"""
Planificación: entrada deseada + entrada de caché -> acción concreta.

Principios
----------
- Sin efectos secundarios; este módulo solo calcula acciones.
- Una acción por entrada como máximo (Create, Modify o Delete); None => no-op.
- Update = parche por atributo: Modify solo lleva los atributos que difieren.
- Propiedades no fijadas y sin default => no gestionadas (no se comparan).
- Cambiar una propiedad inmutable de un recurso existente es un ValidationError.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from olcsync.core.errors import ValidationError
from olcsync.core.resource.models import CacheEntry, Ensure, MatchState
from olcsync.core.resource.schema import ResourceDescriptor
from olcsync.core.runtime.state import StateDiff


# ---------- acciones ----------


@dataclass(frozen=True)
class Action:
    """Acción ejecutable sobre una sola instancia (por identidad)."""
    name: str

    @property
    def verb(self) -> str:
        return type(self).__name__.lower()


@dataclass(frozen=True)
class Create(Action):
    """Crear la instancia con todos los valores especificados o por defecto."""
    attributes: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Modify(Action):
    """Reemplazar solo los atributos que difieren."""
    dn: Optional[str] = None
    changes: Tuple[StateDiff, ...] = ()


@dataclass(frozen=True)
class Delete(Action):
    """Eliminar la instancia."""
    dn: Optional[str] = None


# ---------- comparación de valores ----------


class ValueComparer(Protocol):
    """Cómo se escribe y compara un valor deseado (p. ej. contraseñas con hash)."""
    def to_write(self, prop: str, desired: str) -> str:
        ...

    def in_sync(self, prop: str, desired: str, actual: Optional[str]) -> bool:
        ...


class LiteralComparer:
    """Valores tal cual: se escriben sin cambios y se comparan por igualdad."""

    def to_write(self, prop: str, desired: str) -> str:
        return desired

    def in_sync(self, prop: str, desired: str, actual: Optional[str]) -> bool:
        return desired == actual


# ---------- API pública ----------


def diff_attributes(
    entry: CacheEntry,
    descriptor: ResourceDescriptor,
    comparer: ValueComparer,
) -> List[StateDiff]:
    """
    Compara atributos efectivos deseados vs caché, en el orden del descriptor.
    Los defaults se aplican a ambos lados: un atributo ausente vale su default.
    """
    desired = entry.desired.effective_attributes(descriptor)
    actual = descriptor.with_defaults(entry.attributes)
    accessors = descriptor.accessors()
    diffs: List[StateDiff] = []
    for prop in descriptor.property_names:
        wanted = desired.get(prop)
        if wanted is None:
            continue
        current = accessors[prop](actual)
        if comparer.in_sync(prop, wanted, current):
            continue
        spec = descriptor.spec(prop)
        diffs.append(StateDiff(
            entry.name, prop, wanted, current,
            "error" if not spec.mutable else "warning",
        ))
    return diffs


def classify(
    entry: CacheEntry,
    descriptor: ResourceDescriptor,
    comparer: ValueComparer,
) -> MatchState:
    """Estado de la entrada según la caché actual."""
    if not entry.exists():
        return MatchState.UNMATCHED
    if entry.desired.ensure == Ensure.ABSENT:
        return MatchState.OUT_OF_SYNC
    if diff_attributes(entry, descriptor, comparer):
        return MatchState.OUT_OF_SYNC
    return MatchState.IN_SYNC


def plan_entry(
    entry: CacheEntry,
    descriptor: ResourceDescriptor,
    comparer: ValueComparer,
) -> Optional[Action]:
    """
    Máquina de estados por entrada:
      present + sin real     -> Create
      present + en sync      -> None
      present + desincronía  -> Modify (solo atributos distintos)
      absent  + real         -> Delete
      absent  + sin real     -> None
    """
    state = classify(entry, descriptor, comparer)
    if state == MatchState.IN_SYNC:
        return None

    if entry.desired.ensure == Ensure.ABSENT:
        return None if state == MatchState.UNMATCHED else Delete(name=entry.name, dn=entry.dn)

    if state == MatchState.UNMATCHED:
        attributes = entry.desired.effective_attributes(descriptor)
        ordered: List[Tuple[str, str]] = []
        for prop in descriptor.property_names:
            if prop in attributes:
                ordered.append((prop, comparer.to_write(prop, attributes[prop])))
        return Create(name=entry.name, attributes=tuple(ordered))

    diffs = diff_attributes(entry, descriptor, comparer)
    frozen = [d for d in diffs if not descriptor.spec(d.field).mutable]
    if frozen:
        d = frozen[0]
        raise ValidationError(
            f"{descriptor.kind}[{entry.name}]: '{d.field}' no se puede cambiar una vez creado "
            f"({d.actual} → {d.desired})"
        )

    changes = tuple(
        StateDiff(d.resource_id, d.field, comparer.to_write(d.field, d.desired), d.actual, d.severity)
        for d in diffs
    )
    return Modify(name=entry.name, dn=entry.dn, changes=changes)


def apply_to_cache(entry: CacheEntry, action: Action) -> None:
    """Refleja en la caché el resultado de una acción ya escrita con éxito."""
    if isinstance(action, Create):
        entry.ensure = Ensure.PRESENT
        entry.attributes = dict(action.attributes)
    elif isinstance(action, Modify):
        updated: Dict[str, str] = dict(entry.attributes)
        for change in action.changes:
            updated[change.field] = change.desired
        entry.attributes = updated
    elif isinstance(action, Delete):
        entry.ensure = Ensure.ABSENT

"""
Validación pre-vuelo de entradas deseadas (lógica pura).

Sin I/O; se ejecuta antes de emitir cualquier comando externo.
"""

from typing import Iterable, List

from olcsync.core.errors import ValidationError
from olcsync.core.resource.models import DesiredEntry
from olcsync.core.resource.schema import ResourceDescriptor


def validate_entry(entry: DesiredEntry, descriptor: ResourceDescriptor) -> None:
    """Valida identidad, propiedades conocidas y valores permitidos."""
    if not entry.name:
        raise ValidationError(f"{descriptor.kind}: falta '{descriptor.identity_key}'")

    known = set(descriptor.property_names)
    for prop, value in entry.attributes.items():
        if prop not in known:
            raise ValidationError(f"{descriptor.kind}[{entry.name}]: propiedad desconocida '{prop}'")
        spec = descriptor.spec(prop)
        if not spec.allows(value):
            allowed = ", ".join(sorted(spec.allowed_values or ()))
            raise ValidationError(
                f"{descriptor.kind}[{entry.name}]: valor inválido para {prop}: '{value}' "
                f"(permitidos: {allowed})"
            )


def validate_catalog(entries: Iterable[DesiredEntry], descriptor: ResourceDescriptor) -> List[DesiredEntry]:
    """
    Valida todas las entradas y que las identidades sean únicas.
    Devuelve la lista en el orden del catálogo.
    """
    out: List[DesiredEntry] = []
    seen: set = set()
    for entry in entries:
        validate_entry(entry, descriptor)
        if entry.name in seen:
            raise ValidationError(f"{descriptor.kind}: '{entry.name}' aparece dos veces en el catálogo")
        seen.add(entry.name)
        out.append(entry)
    return out

"""
Resource: esquema, modelos, validación, prefetch y planificación.

Lógica pura; sin I/O ni dependencias de CLI o providers.
"""

from olcsync.core.resource.schema import PropertySpec, ResourceDescriptor
from olcsync.core.resource.models import ActualRecord, CacheEntry, DesiredEntry, Ensure, MatchState
from olcsync.core.resource.validator import validate_catalog, validate_entry

__all__ = [
    "PropertySpec",
    "ResourceDescriptor",
    "ActualRecord",
    "CacheEntry",
    "DesiredEntry",
    "Ensure",
    "MatchState",
    "validate_catalog",
    "validate_entry",
]

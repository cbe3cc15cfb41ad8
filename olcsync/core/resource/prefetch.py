"""
Prefetch: une entradas deseadas con registros descubiertos por identidad.

El discovery se ejecuta exactamente una vez por corrida, sin importar el tamaño del
catálogo.
"""

import logging
from typing import Dict, Sequence

from olcsync.core.errors import AmbiguousStateError
from olcsync.core.resource.models import ActualRecord, CacheEntry, DesiredEntry
from olcsync.core.runtime.state import StateReader

logger = logging.getLogger(__name__)


def index_records(records: Sequence[ActualRecord]) -> Dict[str, ActualRecord]:
    """Indexa por nombre; una identidad repetida es corrupción, no se fusiona."""
    by_name: Dict[str, ActualRecord] = {}
    for record in records:
        if record.name in by_name:
            raise AmbiguousStateError(
                f"Identidad duplicada en el sistema gestionado: {record.name} "
                f"({by_name[record.name].dn} y {record.dn})"
            )
        by_name[record.name] = record
    return by_name


def prefetch(desired: Sequence[DesiredEntry], reader: StateReader) -> Dict[str, CacheEntry]:
    """
    Descubre el estado real y construye la caché de la corrida.

    Returns:
        Dict nombre → CacheEntry, en el orden del catálogo (nombres ya únicos,
        ver validate_catalog)
    """
    by_name = index_records(reader.discover())
    cache: Dict[str, CacheEntry] = {}
    for entry in desired:
        cache[entry.name] = CacheEntry.bind(entry, by_name.get(entry.name))
    matched = sum(1 for c in cache.values() if c.matched)
    logger.debug(
        "prefetch: %d deseadas, %d descubiertas, %d emparejadas",
        len(cache), len(by_name), matched,
    )
    return cache

"""
Base para providers: implementación por defecto de caché, prefetch y plan.

Los providers heredan de aquí y solo implementan la escritura (_write).
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from olcsync.core.errors import OlcsyncError
from olcsync.core.resource.models import CacheEntry, DesiredEntry
from olcsync.core.resource.prefetch import prefetch
from olcsync.core.resource.planner import (
    Action,
    LiteralComparer,
    ValueComparer,
    apply_to_cache,
    plan_entry,
)
from olcsync.core.resource.schema import ResourceDescriptor
from olcsync.core.runtime.state import StateReader

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Base de providers: la caché pertenece a una sola corrida."""

    name: str = "base"

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        reader: StateReader,
        comparer: Optional[ValueComparer] = None,
    ):
        self._descriptor = descriptor
        self.reader = reader
        self.comparer = comparer or LiteralComparer()
        self._cache: Optional[Dict[str, CacheEntry]] = None

    @property
    def descriptor(self) -> ResourceDescriptor:
        return self._descriptor

    @property
    def cache(self) -> Dict[str, CacheEntry]:
        if self._cache is None:
            raise OlcsyncError(f"{self.name}: prefetch() no se ha ejecutado en esta corrida")
        return self._cache

    def prefetch(self, desired: Sequence[DesiredEntry]) -> Dict[str, CacheEntry]:
        self._cache = prefetch(desired, self.reader)
        return self._cache

    def entry(self, name: str) -> CacheEntry:
        try:
            return self.cache[name]
        except KeyError:
            raise OlcsyncError(f"{self.name}: '{name}' no está en el catálogo de esta corrida") from None

    def exists(self, name: str) -> bool:
        return self.entry(name).exists()

    def plan(self, name: str) -> Optional[Action]:
        return plan_entry(self.entry(name), self.descriptor, self.comparer)

    def flush(self, name: str, action: Action) -> None:
        entry = self.entry(name)
        self._write(entry, action)
        apply_to_cache(entry, action)
        logger.info("%s %s: %s aplicado", self.name, name, action.verb)

    @abstractmethod
    def _write(self, entry: CacheEntry, action: Action) -> None:
        """Ejecuta la acción en el sistema gestionado; ConvergenceError si falla."""
        pass

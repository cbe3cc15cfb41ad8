"""
Contratos que deben implementar los providers y el ejecutor de comandos.

El core solo define interfaces; la implementación vive en olcsync/providers/* y
olcsync/system/*.
"""

from typing import Dict, Optional, Protocol, Sequence

from olcsync.core.resource.models import CacheEntry, DesiredEntry
from olcsync.core.resource.planner import Action
from olcsync.core.resource.schema import ResourceDescriptor


class CommandExecutor(Protocol):
    """
    Ejecuta un comando externo bloqueante.
    Devuelve stdout; si el comando falla lanza CommandError con su diagnóstico.
    """
    def run(self, argv: Sequence[str], input: Optional[str] = None) -> str:
        ...


class ProviderContract(Protocol):
    """
    Contrato mínimo de un provider de recursos declarativos.
    El bucle de reconciliación solo habla con esta interfaz.
    """
    @property
    def name(self) -> str:
        """Identificador del tipo de recurso (ej: openldap_database)."""
        ...

    @property
    def descriptor(self) -> ResourceDescriptor:
        ...

    def prefetch(self, desired: Sequence[DesiredEntry]) -> Dict[str, CacheEntry]:
        """Descubre una sola vez y une deseado con real por identidad."""
        ...

    def plan(self, name: str) -> Optional[Action]:
        """Calcula la acción para una entrada (sin ejecutar)."""
        ...

    def flush(self, name: str, action: Action) -> None:
        """Ejecuta la acción y actualiza la caché. Lanza ConvergenceError si falla."""
        ...

    def exists(self, name: str) -> bool:
        """True si la entrada de caché está en ensure=present."""
        ...

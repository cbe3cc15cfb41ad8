"""
Contratos de estado (State): lectura abstracta y diferencias deseado/real.

El core NO implementa la lectura real (slapcat, ldapsearch); eso lo hacen los
providers. Aquí solo se definen interfaces/protocolos.
"""

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from olcsync.core.resource.models import ActualRecord


@dataclass(frozen=True)
class StateDiff:
    """Diferencia entre estado deseado y real (agnóstico de provider)."""
    resource_id: str
    field: str
    desired: Any
    actual: Any
    severity: str = "warning"  # "error", "warning", "info"


class StateReader(Protocol):
    """Protocolo: quien descubre el estado real de un tipo de recurso."""
    def discover(self) -> Sequence[ActualRecord]:
        ...

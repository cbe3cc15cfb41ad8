"""
Core: lógica de reconciliación pura.

ENFORCEMENT (arquitectura limpia):
- Este paquete NO debe importar: olcsync.cli, olcsync.providers.* ni olcsync.system.*.
- Permitido: typing, pydantic, olcsync.core.* (errors, runtime, infra/contracts, resource).
- Los providers y la CLI importan desde core; nunca al revés.
"""

from olcsync.core.errors import (
    AmbiguousStateError,
    CommandError,
    ConfigError,
    ConvergenceError,
    DiscoveryError,
    OlcsyncError,
    ValidationError,
)

__all__ = [
    "OlcsyncError",
    "ConfigError",
    "ValidationError",
    "CommandError",
    "DiscoveryError",
    "AmbiguousStateError",
    "ConvergenceError",
]

"""
Contratos y base para providers de recursos declarativos.

Los providers (openldap_database, ...) implementan estos contratos;
el core no depende de ningún provider concreto.
"""

from olcsync.core.infra.contracts import CommandExecutor, ProviderContract
from olcsync.core.infra.base import BaseProvider

__all__ = ["CommandExecutor", "ProviderContract", "BaseProvider"]

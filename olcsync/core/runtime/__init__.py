"""
Runtime: configuración, contratos de estado y bucle de reconciliación.

No hay estado persistente entre corridas: el discovery se repite en cada una.
"""

from olcsync.core.runtime.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]

"""
Errores de olcsync.

El core solo define excepciones; las capas (CLI) se encargan del formato de salida.
"""

from typing import Optional, Sequence


class OlcsyncError(Exception):
    """Error base de olcsync."""
    pass


class ConfigError(OlcsyncError):
    """Error de configuración (archivo faltante, formato inválido)."""
    pass


class ValidationError(OlcsyncError):
    """Entrada deseada inválida; se detecta antes de escribir nada."""
    pass


class CommandError(OlcsyncError):
    """Un comando externo terminó con error, timeout o no existe."""

    def __init__(self, argv: Sequence[str], returncode: Optional[int], stderr: str):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        super().__init__(
            f"'{' '.join(self.argv)}' falló (código {returncode}): {self.stderr or 'sin diagnóstico'}"
        )


class DiscoveryError(OlcsyncError):
    """La consulta de lectura falló o devolvió una salida no parseable."""

    def __init__(self, message: str, command: Optional[Sequence[str]] = None, diagnostic: str = ""):
        self.command = list(command) if command else []
        self.diagnostic = diagnostic
        super().__init__(message)


class AmbiguousStateError(DiscoveryError):
    """Dos registros descubiertos comparten la misma identidad."""
    pass


class ConvergenceError(OlcsyncError):
    """
    Falló una escritura (create/update/delete).

    Lleva el payload exacto enviado y el diagnóstico del comando para poder
    reproducirlo a mano.
    """

    def __init__(self, name: str, operation: str, payload: str, diagnostic: str):
        self.name = name
        self.operation = operation
        self.payload = payload
        self.diagnostic = diagnostic
        super().__init__(f"No se pudo aplicar '{operation}' sobre {name}: {diagnostic}")

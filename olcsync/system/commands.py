"""
Ejecución de comandos del sistema (slapcat, ldapsearch, ldapmodify, ...).
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from olcsync.core.errors import CommandError

logger = logging.getLogger(__name__)


class SubprocessExecutor:
    """
    Ejecutor de comandos bloqueante con timeout explícito.

    Implementa el contrato CommandExecutor: devuelve stdout o lanza CommandError con
    el diagnóstico del comando (stderr, o stdout si stderr viene vacío).
    """

    def __init__(self, timeout: float = 30.0, cwd: Optional[Path] = None):
        self.timeout = timeout
        self.cwd = cwd

    def run(self, argv: Sequence[str], input: Optional[str] = None) -> str:
        command: List[str] = [str(a) for a in argv]
        logger.debug("ejecutando: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.cwd,
                input=input,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            raise CommandError(command, None, f"Timeout tras {self.timeout:g}s") from None
        except FileNotFoundError:
            raise CommandError(command, None, f"Comando no encontrado: {command[0]}") from None
        except UnicodeDecodeError as e:
            raise CommandError(command, None, f"Salida no UTF-8: {e}") from None

        if result.returncode != 0:
            diagnostic = (result.stderr or "").strip() or (result.stdout or "").strip()
            raise CommandError(command, result.returncode, diagnostic)
        return result.stdout


def which(binary: str) -> Optional[str]:
    """Ruta absoluta de un binario en PATH, o None."""
    return shutil.which(binary)

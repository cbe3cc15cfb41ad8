"""
Paquetes y servicio de OpenLDAP por familia de sistema operativo.

La tabla es configuración (datos), no lógica: se puede sustituir con un YAML
(OLCSYNC_PACKAGES_FILE). La reconciliación solo exige como precondición que los
binarios de lectura/escritura existan y que el servicio esté activo.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from olcsync.core.errors import CommandError, ConfigError
from olcsync.core.infra.contracts import CommandExecutor
from olcsync.system.commands import which


class PackageSpec(BaseModel):
    """Paquetes, servicio y gestor para una familia de SO"""
    packages: List[str] = Field(..., description="Paquetes a instalar (servidor + utilidades)")
    service: str = Field("slapd", description="Unidad del servicio")
    installer: List[str] = Field(..., description="Comando de instalación sin los paquetes")


DEFAULT_PACKAGES: Dict[str, PackageSpec] = {
    "debian": PackageSpec(
        packages=["slapd", "ldap-utils"],
        installer=["apt-get", "install", "-y"],
    ),
    "redhat": PackageSpec(
        packages=["openldap-servers", "openldap-clients"],
        installer=["dnf", "install", "-y"],
    ),
    "suse": PackageSpec(
        packages=["openldap2", "openldap2-client"],
        installer=["zypper", "--non-interactive", "install"],
    ),
    "archlinux": PackageSpec(
        packages=["openldap"],
        installer=["pacman", "-S", "--noconfirm"],
    ),
}

# ID / ID_LIKE de /etc/os-release → familia
_FAMILY_ALIASES = {
    "debian": "debian", "ubuntu": "debian",
    "rhel": "redhat", "fedora": "redhat", "centos": "redhat", "rocky": "redhat", "almalinux": "redhat",
    "suse": "suse", "opensuse": "suse", "sles": "suse",
    "arch": "archlinux", "archlinux": "archlinux",
}

REQUIRED_BINARIES = ("slapcat", "ldapmodify")


def load_package_table(path: Optional[Path] = None) -> Dict[str, PackageSpec]:
    """
    Tabla OS → PackageSpec. Si se pasa un YAML, sus familias sustituyen a las
    de la tabla por defecto.

    Formato:
      debian:
        packages: [slapd, ldap-utils]
        service: slapd
        installer: [apt-get, install, -y]
    """
    table = dict(DEFAULT_PACKAGES)
    if path is None:
        return table
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"No se pudo leer la tabla de paquetes {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: se esperaba un mapeo familia → paquetes")
    for family, spec in data.items():
        try:
            table[str(family)] = PackageSpec(**(spec or {}))
        except (TypeError, PydanticValidationError) as e:
            raise ConfigError(f"{path}: entrada inválida para '{family}': {e}") from e
    return table


def detect_os_family(os_release: Path = Path("/etc/os-release")) -> Optional[str]:
    """Familia del SO a partir de ID / ID_LIKE, o None si no se reconoce."""
    try:
        content = os_release.read_text()
    except OSError:
        return None
    fields: Dict[str, str] = {}
    for line in content.splitlines():
        if "=" in line:
            key, value = line.split("=", 1)
            fields[key.strip()] = value.strip().strip('"')
    candidates = [fields.get("ID", "")] + fields.get("ID_LIKE", "").split()
    for candidate in candidates:
        family = _FAMILY_ALIASES.get(candidate.lower())
        if family:
            return family
    return None


def install_commands(spec: PackageSpec) -> List[List[str]]:
    """Comandos (opacos) para instalar, habilitar y arrancar el servicio."""
    return [
        list(spec.installer) + list(spec.packages),
        ["systemctl", "enable", spec.service],
        ["systemctl", "start", spec.service],
    ]


def check_preconditions(
    executor: Optional[CommandExecutor] = None,
    service: str = "slapd",
    binaries: Sequence[str] = REQUIRED_BINARIES,
) -> List[str]:
    """
    Verifica que la reconciliación pueda correr en este host.

    Returns:
        Lista de problemas; vacía si todo está listo
    """
    problems: List[str] = []
    for binary in binaries:
        if which(binary) is None:
            problems.append(f"Falta el binario '{binary}' (instala las utilidades de OpenLDAP)")
    if executor is not None:
        try:
            executor.run(["systemctl", "is-active", "--quiet", service])
        except CommandError as e:
            problems.append(f"El servicio '{service}' no está activo: {e.stderr or 'inactivo'}")
    return problems

"""
Discovery: lee las bases de datos existentes en cn=config.

Una sola consulta por corrida, filtrada a los backends que gestiona el descriptor.
La salida (LDIF) se convierte en ActualRecord en el mismo orden en que slapd
enumera las bases; no se ordena.
"""

import logging
import re
from typing import Dict, List

from olcsync.core.errors import CommandError, DiscoveryError
from olcsync.core.infra.contracts import CommandExecutor
from olcsync.core.resource.models import ActualRecord
from olcsync.core.resource.prefetch import index_records
from olcsync.core.resource.schema import ResourceDescriptor
from olcsync.core.runtime.settings import ReadMode

from . import ldifio
from .descriptor import DATABASE

logger = logging.getLogger(__name__)

CONFIG_BASE = "cn=config"

# olcDatabase: {1}mdb -> mdb
_ORDER_INDEX = re.compile(r"^\{-?\d+\}")


def strip_index(value: str) -> str:
    return _ORDER_INDEX.sub("", value)


class DatabaseReader:
    """Implementa StateReader para openldap_database."""

    def __init__(
        self,
        executor: CommandExecutor,
        descriptor: ResourceDescriptor = DATABASE,
        read_mode: ReadMode = "slapcat",
        ldap_uri: str = "ldapi:///",
    ):
        self.executor = executor
        self.descriptor = descriptor
        self.read_mode = read_mode
        self.ldap_uri = ldap_uri

    def search_filter(self) -> str:
        """(|(olcDatabase=bdb)(olcDatabase=hdb)(olcDatabase=mdb))"""
        backend = self.descriptor.spec("backend")
        terms = "".join(f"({backend.attribute}={b})" for b in sorted(backend.allowed_values or ()))
        return f"(|{terms})"

    def command(self) -> List[str]:
        if self.read_mode == "ldapsearch":
            return [
                "ldapsearch", "-LLL", "-Q", "-Y", "EXTERNAL", "-H", self.ldap_uri,
                "-o", "ldif-wrap=no", "-b", CONFIG_BASE, self.search_filter(),
            ]
        return ["slapcat", "-b", CONFIG_BASE, "-H", f"ldap:///???{self.search_filter()}"]

    def discover(self) -> List[ActualRecord]:
        """
        Ejecuta la consulta y parsea la salida.

        Raises:
            DiscoveryError: el comando falló o la salida no es LDIF válido
            AmbiguousStateError: dos bases con el mismo sufijo
        """
        argv = self.command()
        try:
            raw = self.executor.run(argv)
        except CommandError as e:
            raise DiscoveryError(
                f"No se pudo leer {CONFIG_BASE}: {e.stderr or e}",
                command=e.argv,
                diagnostic=e.stderr,
            ) from e
        records = self.parse(raw)
        logger.debug("discovery: %d bases encontradas", len(records))
        return records

    def parse(self, raw: str) -> List[ActualRecord]:
        """
        LDIF → registros, solo con los atributos observados (sin defaults).

        Los atributos no reconocidos se ignoran sin decodificarlos; un atributo
        repetido conserva su último valor.
        """
        attribute_map = self.descriptor.attribute_map()
        identity = self.descriptor.identity_key
        records: List[ActualRecord] = []

        for dn, entry in ldifio.read_records(raw):
            values: Dict[str, str] = {}
            for attr, found in entry.items():
                prop = attribute_map.get(attr.lower())
                if prop is None or not found:
                    continue
                value = self._text(dn, attr, found[-1])
                values[prop] = strip_index(value) if prop == "backend" else value

            name = values.pop(identity, None)
            if not name:
                logger.debug("discovery: se ignora %s (sin %s)", dn, self.descriptor.identity_attribute)
                continue
            records.append(ActualRecord(name=name, attributes=values, dn=dn))

        index_records(records)
        return records

    @staticmethod
    def _text(dn: str, attr: str, value: ldifio.Value) -> str:
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DiscoveryError(f"LDIF inválido: {attr} de {dn} no es UTF-8") from e
        return value

    def format_record(self, record: ActualRecord) -> str:
        """Párrafo LDIF equivalente a un registro (inverso de parse)."""
        lines: List[ldifio.Line] = []
        if record.dn:
            lines.append(("dn", record.dn))
        lines.append((self.descriptor.identity_attribute, record.name))
        for prop in self.descriptor.property_names:
            value = record.attributes.get(prop)
            if value is not None:
                lines.append((self.descriptor.spec(prop).attribute, value))
        return ldifio.format_paragraph(lines)


def format_records(reader: DatabaseReader, records: List[ActualRecord]) -> str:
    return "\n".join(reader.format_record(r) for r in records)

"""
Provider openldap_database: converge bases de datos de slapd vía ldapmodify.

Flujo por corrida:
  prefetch (un discovery) → plan por entrada → escritura LDIF → caché actualizada

Las escrituras van por SASL EXTERNAL sobre ldapi:/// (root local). Update es un
parche por atributo: un bloque 'replace:' por cada atributo que difiere.
"""

import logging
import re
from typing import List, Optional

from olcsync.core.errors import CommandError, ConvergenceError
from olcsync.core.infra.base import BaseProvider
from olcsync.core.infra.contracts import CommandExecutor
from olcsync.core.resource.models import CacheEntry
from olcsync.core.resource.planner import Action, Create, Delete, Modify
from olcsync.core.resource.schema import ResourceDescriptor
from olcsync.core.runtime.settings import Settings, load_settings

from . import ldifio
from .descriptor import DATABASE
from .discovery import CONFIG_BASE, DatabaseReader
from .password import check_password, openldap_password, scheme_of

logger = logging.getLogger(__name__)


class PasswordComparer:
    """
    ValueComparer para propiedades con transform=True (olcRootPW).

    Un valor deseado en claro se transforma con openldap_password al escribir y se
    verifica contra el hash guardado al comparar; un valor que ya trae esquema
    ({SSHA}, {CRYPT}...) se escribe y compara tal cual.
    """

    def __init__(self, descriptor: ResourceDescriptor, context: str):
        self.descriptor = descriptor
        self.context = context

    def _transformed(self, prop: str, value: str) -> bool:
        return self.descriptor.spec(prop).transform and scheme_of(value) is None

    def to_write(self, prop: str, desired: str) -> str:
        if self._transformed(prop, desired):
            return openldap_password(desired, context=self.context)
        return desired

    def in_sync(self, prop: str, desired: str, actual: Optional[str]) -> bool:
        if actual is None:
            return False
        if self._transformed(prop, desired):
            return check_password(desired, actual)
        return desired == actual


class DatabaseProvider(BaseProvider):
    """Reconciliador de openldap_database."""

    name = "openldap_database"

    def __init__(
        self,
        executor: CommandExecutor,
        settings: Optional[Settings] = None,
        reader: Optional[DatabaseReader] = None,
    ):
        settings = settings or load_settings()
        reader = reader or DatabaseReader(
            executor,
            descriptor=DATABASE,
            read_mode=settings.read_mode,
            ldap_uri=settings.ldap_uri,
        )
        super().__init__(DATABASE, reader, PasswordComparer(DATABASE, settings.host_id))
        self.executor = executor
        self.ldap_uri = settings.ldap_uri

    def modify_command(self) -> List[str]:
        return ["ldapmodify", "-Q", "-Y", "EXTERNAL", "-H", self.ldap_uri]

    # ---------- LDIF ----------

    def render(self, entry: CacheEntry, action: Action) -> str:
        """LDIF exacto que se envía a ldapmodify para una acción."""
        if isinstance(action, Create):
            attributes = dict(action.attributes)
            backend = attributes.pop("backend")
            lines: List[ldifio.Line] = [
                ("olcDatabase", backend),
                (self.descriptor.identity_attribute, entry.name),
            ]
            for prop, value in attributes.items():
                lines.append((self.descriptor.spec(prop).attribute, value))
            return ldifio.render_add(
                new_database_dn(backend),
                ["olcDatabaseConfig", f"olc{backend.capitalize()}Config"],
                lines,
            )

        dn = getattr(action, "dn", None) or entry.dn
        if not dn:
            raise ConvergenceError(entry.name, action.verb, "", "DN de la base desconocido")

        if isinstance(action, Modify):
            return ldifio.render_modify(
                dn,
                [(self.descriptor.spec(c.field).attribute, c.desired) for c in action.changes],
            )
        if isinstance(action, Delete):
            return ldifio.render_delete(dn)
        raise TypeError(f"Acción no soportada: {action!r}")

    def redact(self, payload: str) -> str:
        """Payload con los atributos secretos enmascarados (para logs y CLI)."""
        return redact_ldif(self.descriptor, payload)

    # ---------- escritura ----------

    def _write(self, entry: CacheEntry, action: Action) -> None:
        payload = self.render(entry, action)
        logger.debug("%s %s:\n%s", action.verb, entry.name, self.redact(payload))
        try:
            self.executor.run(self.modify_command(), input=payload)
        except CommandError as e:
            raise ConvergenceError(entry.name, action.verb, payload, e.stderr or str(e)) from e

        if isinstance(action, Create):
            # slapd asigna el índice {n}; se usa el DN sin índice hasta el próximo discovery
            entry.dn = new_database_dn(dict(action.attributes)["backend"])


def new_database_dn(backend: str) -> str:
    return f"olcDatabase={backend},{CONFIG_BASE}"


def redact_ldif(descriptor: ResourceDescriptor, payload: str) -> str:
    secrets = [descriptor.spec(name).attribute for name in descriptor.secret_names()]
    if not secrets:
        return payload
    pattern = re.compile(
        r"^(" + "|".join(re.escape(a) for a in secrets) + r")(::?) .*$",
        re.IGNORECASE | re.MULTILINE,
    )
    return pattern.sub(r"\1\2 ********", payload)

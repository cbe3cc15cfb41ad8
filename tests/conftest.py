from __future__ import annotations

import base64
import re
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from olcsync.core.errors import CommandError
from olcsync.core.runtime.settings import Settings
from olcsync.providers.openldap.database import DatabaseProvider
from olcsync.providers.openldap.ldifio import format_line

HOST_ID = "ldap-test.example.com"


def split_line(line: str) -> Tuple[str, str]:
    """'attr: valor' / 'attr:: base64' de un registro de cambio → (attr, valor)."""
    attr, rest = line.split(":", 1)
    if rest.startswith(":"):
        return attr, base64.b64decode(rest[1:].strip()).decode("utf-8")
    return attr, rest.lstrip(" ")


# ---------- fakes ----------


class FakeSlapd:
    """
    Executor en memoria que se comporta como slapd para cn=config:
    slapcat/ldapsearch devuelven las bases en LDIF y ldapmodify aplica
    add / modify (replace) / delete.
    """

    def __init__(self) -> None:
        self.databases: List[Tuple[str, Dict[str, str]]] = []
        self.calls: List[Tuple[List[str], Optional[str]]] = []
        # subcadena del payload -> diagnóstico con el que falla ldapmodify
        self.errors: Dict[str, str] = {}
        self.read_error: Optional[str] = None

    # ---------- estado ----------

    def add_database(self, backend: str, suffix: str, **attrs: str) -> str:
        index = len(self.databases) + 1
        dn = f"olcDatabase={{{index}}}{backend},cn=config"
        values = {"olcDatabase": f"{{{index}}}{backend}", "olcSuffix": suffix}
        values.update(attrs)
        self.databases.append((dn, values))
        return dn

    def find(self, suffix: str) -> Optional[Dict[str, str]]:
        for _, values in self.databases:
            if values.get("olcSuffix") == suffix:
                return values
        return None

    def writes(self) -> List[str]:
        return [payload or "" for argv, payload in self.calls if argv[0] == "ldapmodify"]

    def reads(self) -> List[List[str]]:
        return [argv for argv, _ in self.calls if argv[0] in ("slapcat", "ldapsearch")]

    # ---------- CommandExecutor ----------

    def run(self, argv: Sequence[str], input: Optional[str] = None) -> str:
        argv = list(argv)
        self.calls.append((argv, input))
        if argv[0] in ("slapcat", "ldapsearch"):
            if self.read_error:
                raise CommandError(argv, 1, self.read_error)
            return self.dump()
        if argv[0] == "ldapmodify":
            for needle, diagnostic in self.errors.items():
                if needle in (input or ""):
                    raise CommandError(argv, 80, diagnostic)
            self._apply(input or "")
            return ""
        raise CommandError(argv, 127, f"{argv[0]}: command not found")

    def dump(self) -> str:
        paragraphs = []
        for dn, values in self.databases:
            backend = re.sub(r"^\{\d+\}", "", values["olcDatabase"])
            lines = [
                format_line("dn", dn),
                "objectClass: olcDatabaseConfig",
                f"objectClass: olc{backend.capitalize()}Config",
            ]
            lines.extend(format_line(attr, value) for attr, value in values.items())
            lines.append("structuralObjectClass: olcMdbConfig")
            lines.append("entryUUID: 5c4d2a4e-1a1b-103c-8f5e-7b0f2e1c9a11")
            paragraphs.append("\n".join(lines) + "\n")
        return "\n".join(paragraphs)

    def _apply(self, payload: str) -> None:
        lines = [line for line in payload.split("\n") if line]
        dn = split_line(lines[0])[1]
        changetype = split_line(lines[1])[1]
        body = lines[2:]

        if changetype == "add":
            values: Dict[str, str] = {}
            for line in body:
                attr, value = split_line(line)
                if attr != "objectClass":
                    values[attr] = value
            self.add_database(values.pop("olcDatabase"), values.pop("olcSuffix"), **values)
            return

        position = self._locate(dn)
        if changetype == "delete":
            del self.databases[position]
            return

        values = self.databases[position][1]
        for line in body:
            if line == "-":
                continue
            attr, value = split_line(line)
            if attr == "replace":
                values.pop(value, None)
            else:
                values[attr] = value

    def _locate(self, dn: str) -> int:
        for i, (current, _) in enumerate(self.databases):
            if current == dn or re.sub(r"\{\d+\}", "", current) == dn:
                return i
        raise CommandError(["ldapmodify"], 32, f"No such object ({dn})")


# ---------- fixtures ----------


@pytest.fixture
def slapd() -> FakeSlapd:
    return FakeSlapd()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(catalog=tmp_path / "databases.yaml", host_id=HOST_ID)


@pytest.fixture
def provider(slapd, settings) -> DatabaseProvider:
    return DatabaseProvider(slapd, settings=settings)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "OLCSYNC_CATALOG",
        "OLCSYNC_LDAP_URI",
        "OLCSYNC_READ_MODE",
        "OLCSYNC_COMMAND_TIMEOUT",
        "OLCSYNC_HOST_ID",
        "OLCSYNC_PACKAGES_FILE",
        "OLCSYNC_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)

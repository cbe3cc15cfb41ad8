from pathlib import Path

import pytest

from olcsync.catalog.loader import CatalogLoader, DatabaseConfig
from olcsync.core.errors import ConfigError, ValidationError
from olcsync.core.resource.models import Ensure

EXAMPLE = Path(__file__).resolve().parent.parent / "examples" / "databases.yaml"


def write(tmp_path, content):
    path = tmp_path / "databases.yaml"
    path.write_text(content)
    return path


def test_example_catalog_loads():
    entries = CatalogLoader(EXAMPLE).entries()
    assert [e.name for e in entries] == [
        "dc=example,dc=com",
        "dc=archive,dc=example,dc=com",
        "dc=legacy,dc=example,dc=com",
    ]
    assert entries[0].attributes["dbmaxsize"] == "1073741824"
    assert entries[1].attributes["readonly"] == "TRUE"
    assert entries[2].ensure == Ensure.ABSENT
    assert entries[2].attributes == {}


def test_unset_fields_are_not_sent():
    entry = DatabaseConfig(suffix="dc=a", directory="/srv").to_entry()
    assert entry.attributes == {"directory": "/srv"}


def test_empty_file_is_empty_catalog(tmp_path):
    assert CatalogLoader(write(tmp_path, "")).entries() == []


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="no encontrado"):
        CatalogLoader(tmp_path / "nope.yaml").load()


def test_bad_yaml(tmp_path):
    with pytest.raises(ConfigError, match="parsear YAML"):
        CatalogLoader(write(tmp_path, "databases: [\n")).load()


def test_root_must_be_mapping(tmp_path):
    with pytest.raises(ConfigError, match="raíz"):
        CatalogLoader(write(tmp_path, "- suffix: dc=a\n")).load()


def test_unknown_key_is_rejected(tmp_path):
    path = write(tmp_path, "databases:\n  - suffix: dc=a\n    olcSuffix: dc=a\n")
    with pytest.raises(ValidationError, match="catálogo inválido"):
        CatalogLoader(path).load()


def test_bad_ensure_is_rejected(tmp_path):
    path = write(tmp_path, "databases:\n  - suffix: dc=a\n    ensure: maybe\n")
    with pytest.raises(ValidationError):
        CatalogLoader(path).entries()

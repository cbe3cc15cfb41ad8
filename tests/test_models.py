import pydantic
import pytest

from olcsync.core.resource.models import ActualRecord, CacheEntry, DesiredEntry, Ensure
from olcsync.providers.openldap.descriptor import DATABASE


def test_desired_entry_strips_name_and_defaults_to_present():
    entry = DesiredEntry(name="  dc=example,dc=com ")
    assert entry.name == "dc=example,dc=com"
    assert entry.ensure == Ensure.PRESENT
    assert entry.attributes == {}


def test_attributes_are_stringified():
    entry = DesiredEntry(
        name="dc=example,dc=com",
        attributes={"readonly": True, "dbmaxsize": 1048576, "rootdn": None},
    )
    assert entry.attributes == {"readonly": "TRUE", "dbmaxsize": "1048576"}
    assert DesiredEntry(name="x", attributes={"readonly": False}).attributes == {"readonly": "FALSE"}


def test_desired_entry_is_frozen():
    entry = DesiredEntry(name="dc=example,dc=com")
    with pytest.raises(pydantic.ValidationError):
        entry.name = "dc=other"


def test_effective_attributes_fill_defaults():
    entry = DesiredEntry(name="dc=example,dc=com", attributes={"backend": "hdb"})
    assert entry.effective_attributes(DATABASE) == {
        "backend": "hdb",
        "directory": "/var/lib/ldap",
        "readonly": "FALSE",
    }


def test_bind_without_actual_is_absent():
    entry = CacheEntry.bind(DesiredEntry(name="dc=example,dc=com"), None)
    assert not entry.matched
    assert not entry.exists()
    assert entry.dn is None
    assert entry.name == "dc=example,dc=com"


def test_bind_copies_actual_attributes():
    record = ActualRecord("dc=example,dc=com", {"backend": "mdb"}, dn="olcDatabase={1}mdb,cn=config")
    entry = CacheEntry.bind(DesiredEntry(name="dc=example,dc=com"), record)
    assert entry.matched
    assert entry.exists()
    assert entry.dn == "olcDatabase={1}mdb,cn=config"

    entry.attributes["backend"] = "hdb"
    assert record.attributes == {"backend": "mdb"}

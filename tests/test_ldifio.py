import pytest

from olcsync.core.errors import DiscoveryError
from olcsync.providers.openldap import ldifio


def test_read_records_splits_paragraphs_and_joins_continuations():
    text = (
        "dn: olcDatabase={1}mdb,cn=config\r\n"
        "olcSuffix: dc=exa\n"
        " mple,dc=com\n"
        "\n"
        "\n"
        "dn: olcDatabase={2}hdb,cn=config\n"
        "olcDatabase: {2}hdb\n"
    )
    assert ldifio.read_records(text) == [
        ("olcDatabase={1}mdb,cn=config", {"olcSuffix": ["dc=example,dc=com"]}),
        ("olcDatabase={2}hdb,cn=config", {"olcDatabase": ["{2}hdb"]}),
    ]


def test_read_records_empty_input():
    assert ldifio.read_records("") == []
    assert ldifio.read_records("\n\n") == []


def test_folded_comment_does_not_touch_previous_attribute():
    text = (
        "dn: olcDatabase={1}mdb,cn=config\n"
        "olcSuffix: dc=example,dc=com\n"
        "# comentario largo\n"
        " que sigue aquí\n"
        "olcDbDirectory: /var/lib/ldap\n"
    )
    _, entry = ldifio.read_records(text)[0]
    assert entry == {"olcSuffix": ["dc=example,dc=com"], "olcDbDirectory": ["/var/lib/ldap"]}


def test_read_records_base64_and_colons_in_value():
    text = (
        "dn: olcDatabase={1}mdb,cn=config\n"
        "olcSuffix:: ZGM9ZXhhbXBsZSxkYz1jb20=\n"
        "olcAccess: to * by dn.exact=x:y write\n"
    )
    _, entry = ldifio.read_records(text)[0]
    assert entry["olcSuffix"] == ["dc=example,dc=com"]
    assert entry["olcAccess"] == ["to * by dn.exact=x:y write"]


def test_non_utf8_value_is_returned_as_bytes():
    _, entry = ldifio.read_records("dn: olcDatabase={1}mdb,cn=config\nolcUnknownBlob:: /w==\n")[0]
    assert entry["olcUnknownBlob"] == [b"\xff"]


def test_repeated_attribute_keeps_every_value_in_order():
    text = "dn: olcDatabase={1}mdb,cn=config\nolcDbDirectory: /a\nolcDbDirectory: /b\n"
    assert ldifio.read_records(text)[0][1]["olcDbDirectory"] == ["/a", "/b"]


@pytest.mark.parametrize("text", [
    "dn: olcDatabase={1}mdb,cn=config\nno separator here\n",
    "olcSuffix: dc=a\n",
])
def test_read_records_rejects_malformed(text):
    with pytest.raises(DiscoveryError, match="LDIF inválido"):
        ldifio.read_records(text)


def test_format_line_uses_base64_when_unsafe():
    assert ldifio.format_line("olcSuffix", "dc=example,dc=com") == "olcSuffix: dc=example,dc=com"
    assert ldifio.format_line("olcSuffix", " lead") == "olcSuffix:: IGxlYWQ="
    assert ldifio.format_line("olcSuffix", "o=Españ").startswith("olcSuffix:: ")
    text = "dn: olcDatabase={1}mdb,cn=config\n" + ldifio.format_line("olcSuffix", "o=Españ") + "\n"
    assert ldifio.read_records(text)[0][1] == {"olcSuffix": ["o=Españ"]}


def test_render_add():
    payload = ldifio.render_add(
        "olcDatabase=mdb,cn=config",
        ["olcDatabaseConfig", "olcMdbConfig"],
        [("olcDatabase", "mdb"), ("olcSuffix", "dc=example,dc=com")],
    )
    assert payload == (
        "dn: olcDatabase=mdb,cn=config\n"
        "changetype: add\n"
        "objectClass: olcDatabaseConfig\n"
        "objectClass: olcMdbConfig\n"
        "olcDatabase: mdb\n"
        "olcSuffix: dc=example,dc=com\n"
    )


def test_render_modify_one_replace_block_per_attribute():
    payload = ldifio.render_modify(
        "olcDatabase={1}mdb,cn=config",
        [("olcDbDirectory", "/srv/ldap"), ("olcReadOnly", "TRUE")],
    )
    assert payload == (
        "dn: olcDatabase={1}mdb,cn=config\n"
        "changetype: modify\n"
        "replace: olcDbDirectory\n"
        "olcDbDirectory: /srv/ldap\n"
        "-\n"
        "replace: olcReadOnly\n"
        "olcReadOnly: TRUE\n"
        "-\n"
    )


def test_render_modify_without_value_clears_attribute():
    payload = ldifio.render_modify("olcDatabase={1}mdb,cn=config", [("olcDbMaxSize", None)])
    assert "replace: olcDbMaxSize\n-\n" in payload


def test_render_delete():
    assert ldifio.render_delete("olcDatabase={1}mdb,cn=config") == (
        "dn: olcDatabase={1}mdb,cn=config\nchangetype: delete\n"
    )

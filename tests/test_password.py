import base64
import hashlib

import pytest

from olcsync.core.errors import ValidationError
from olcsync.providers.openldap import DATABASE, PasswordComparer
from olcsync.providers.openldap.password import SALT_LENGTH, check_password, openldap_password, scheme_of


def ssha(secret: str, salt: bytes) -> str:
    digest = hashlib.sha1(secret.encode() + salt).digest()
    return "{SSHA}" + base64.b64encode(digest + salt).decode()


def test_hash_is_deterministic_for_a_context():
    first = openldap_password("s3cr3t", context="ldap1.example.com")
    assert first == openldap_password("s3cr3t", context="ldap1.example.com")
    assert first.startswith("{SSHA}")


def test_salt_is_derived_from_context():
    value = openldap_password("s3cr3t", context="ldap1.example.com")
    raw = base64.b64decode(value[len("{SSHA}"):])
    assert len(raw) == 20 + SALT_LENGTH
    assert raw[20:] == hashlib.sha1(b"ldap1.example.com").digest()[:SALT_LENGTH]
    assert value == ssha("s3cr3t", raw[20:])


def test_different_context_gives_different_hash():
    assert openldap_password("s3cr3t", context="a") != openldap_password("s3cr3t", context="b")


def test_default_context_comes_from_host_id(monkeypatch):
    monkeypatch.setenv("OLCSYNC_HOST_ID", "ldap9.example.com")
    assert openldap_password("s3cr3t") == openldap_password("s3cr3t", context="ldap9.example.com")


@pytest.mark.parametrize("args", [(), ("a", "b")])
def test_wrong_number_of_arguments(args):
    with pytest.raises(ValidationError, match=rf"Wrong number of arguments given \({len(args)} for 1\)"):
        openldap_password(*args, context="x")


def test_secret_must_be_text():
    with pytest.raises(ValidationError, match="se esperaba texto"):
        openldap_password(1234, context="x")


def test_scheme_of():
    assert scheme_of("{SSHA}abc") == "SSHA"
    assert scheme_of("{crypt}$6$abc") == "CRYPT"
    assert scheme_of("plain") is None
    assert scheme_of("") is None


def test_check_password_accepts_any_ssha_salt():
    stored = ssha("s3cr3t", b"\x00\x01\x02\x03")
    assert check_password("s3cr3t", stored)
    assert not check_password("wrong", stored)


def test_check_password_other_schemes():
    sha = "{SHA}" + base64.b64encode(hashlib.sha1(b"s3cr3t").digest()).decode()
    assert check_password("s3cr3t", sha)
    assert check_password("s3cr3t", "s3cr3t")
    assert not check_password("s3cr3t", "other")
    assert not check_password("s3cr3t", "{CRYPT}$6$salt$hash")
    assert not check_password("s3cr3t", "{SSHA}***")
    assert not check_password("s3cr3t", "{SSHA}" + base64.b64encode(b"short").decode())


def test_comparer_hashes_plaintext_only_for_transformed_properties():
    comparer = PasswordComparer(DATABASE, "ldap1.example.com")
    assert comparer.to_write("rootpw", "s3cr3t") == openldap_password("s3cr3t", context="ldap1.example.com")
    assert comparer.to_write("rootpw", "{SSHA}already") == "{SSHA}already"
    assert comparer.to_write("rootdn", "cn=admin") == "cn=admin"


def test_comparer_in_sync():
    comparer = PasswordComparer(DATABASE, "ldap1.example.com")
    stored = openldap_password("s3cr3t", context="other-host")
    assert comparer.in_sync("rootpw", "s3cr3t", stored)
    assert not comparer.in_sync("rootpw", "changed", stored)
    assert not comparer.in_sync("rootpw", "s3cr3t", None)
    assert comparer.in_sync("rootpw", stored, stored)
    assert comparer.in_sync("directory", "/a", "/a")
    assert not comparer.in_sync("directory", "/a", "/b")

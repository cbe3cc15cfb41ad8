"""
Descriptor del recurso openldap_database (una base de datos / backend de slapd).

La identidad es el sufijo (olcSuffix). El backend no se puede cambiar una vez creada
la base: slapd no lo permite.
"""

from olcsync.core.resource.schema import PropertySpec, ResourceDescriptor

BACKENDS = frozenset({"bdb", "hdb", "mdb"})

DATABASE = ResourceDescriptor(
    kind="openldap_database",
    identity_key="suffix",
    identity_attribute="olcSuffix",
    properties=(
        ("backend", PropertySpec("olcDatabase", allowed_values=BACKENDS, default="mdb", mutable=False)),
        ("directory", PropertySpec("olcDbDirectory", default="/var/lib/ldap")),
        ("rootdn", PropertySpec("olcRootDN")),
        ("rootpw", PropertySpec("olcRootPW", secret=True, transform=True)),
        ("readonly", PropertySpec("olcReadOnly", allowed_values=frozenset({"TRUE", "FALSE"}), default="FALSE")),
        ("dbmaxsize", PropertySpec("olcDbMaxSize")),
    ),
)

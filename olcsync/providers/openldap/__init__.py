"""
Provider OpenLDAP: bases de datos de slapd gestionadas en cn=config.
"""

from .database import DatabaseProvider, PasswordComparer
from .descriptor import BACKENDS, DATABASE
from .discovery import DatabaseReader
from .password import check_password, openldap_password

__all__ = [
    "DatabaseProvider",
    "PasswordComparer",
    "DatabaseReader",
    "DATABASE",
    "BACKENDS",
    "openldap_password",
    "check_password",
]

"""
Hash de contraseñas para olcRootPW en el formato que espera slapd.

{SSHA} + base64(SHA1(secreto + sal) + sal), con la sal derivada del contexto (el
identificador del host). Mismo contexto => mismo hash, lo que permite comparar un
valor deseado con el ya guardado sin reescribirlo en cada corrida.
"""

import base64
import binascii
import hashlib
import hmac
import re
from typing import Optional

from olcsync.core.errors import ValidationError
from olcsync.core.runtime.settings import load_settings

SCHEME = "{SSHA}"
SALT_LENGTH = 8
_SHA1_LENGTH = 20

_SCHEME_PREFIX = re.compile(r"^\{([A-Za-z0-9.\-]+)\}")


def _salt(context: str) -> bytes:
    return hashlib.sha1(context.encode("utf-8")).digest()[:SALT_LENGTH]


def _ssha(secret: str, salt: bytes) -> str:
    digest = hashlib.sha1(secret.encode("utf-8") + salt).digest()
    return SCHEME + base64.b64encode(digest + salt).decode("ascii")


def openldap_password(*args: str, context: Optional[str] = None) -> str:
    """
    Transforma un secreto en claro en un valor {SSHA} para olcRootPW.

    Args:
        args: exactamente un argumento, el secreto
        context: material de la sal; por defecto el host_id de la configuración

    Raises:
        ValidationError: si no se pasa exactamente un argumento o no es texto
    """
    if len(args) != 1:
        raise ValidationError(f"openldap_password(): Wrong number of arguments given ({len(args)} for 1)")
    secret = args[0]
    if not isinstance(secret, str):
        raise ValidationError(f"openldap_password(): se esperaba texto, no {type(secret).__name__}")
    if context is None:
        context = load_settings().host_id
    return _ssha(secret, _salt(context))


def scheme_of(value: str) -> Optional[str]:
    """'{SSHA}abc' → 'SSHA'; None si el valor no lleva esquema."""
    match = _SCHEME_PREFIX.match(value or "")
    return match.group(1).upper() if match else None


def check_password(secret: str, stored: str) -> bool:
    """
    True si `secret` (en claro) corresponde al valor guardado.

    Soporta {SSHA} con cualquier sal, {SHA} y valores en claro. Para otros esquemas
    ({CRYPT}, {PBKDF2}...) no se puede verificar y devuelve False.
    """
    scheme = scheme_of(stored)
    if scheme is None:
        return hmac.compare_digest(secret.encode("utf-8"), stored.encode("utf-8"))

    payload = stored[len(scheme) + 2:]
    try:
        raw = base64.b64decode(payload, validate=True)
    except binascii.Error:
        return False

    if scheme == "SSHA":
        if len(raw) <= _SHA1_LENGTH:
            return False
        digest, salt = raw[:_SHA1_LENGTH], raw[_SHA1_LENGTH:]
        expected = hashlib.sha1(secret.encode("utf-8") + salt).digest()
        return hmac.compare_digest(digest, expected)
    if scheme == "SHA":
        return hmac.compare_digest(raw, hashlib.sha1(secret.encode("utf-8")).digest())
    return False

"""
Lectura y escritura de LDIF (RFC 2849) en el subconjunto que usan slapcat y ldapmodify.

Lectura: delegada en ldif.LDIFParser (párrafos, continuaciones, base64 y comentarios).
Los valores que no son UTF-8 llegan como bytes y se deciden aguas arriba.

Escritura: registros de cambio add / modify (replace) / delete.
"""

import base64
import io
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ldif import LDIFParser

from olcsync.core.errors import DiscoveryError

Line = Tuple[str, str]
Value = Union[str, bytes]
Record = Tuple[str, Dict[str, List[Value]]]

# Un valor debe ir en base64 si empieza por espacio, ':' o '<', termina en espacio
# o lleva caracteres fuera de ASCII imprimible
_UNSAFE_VALUE = re.compile(r"(^[ :<])|( $)|[^\x20-\x7e]")


# ---------- lectura ----------


def read_records(text: str) -> List[Record]:
    """
    Texto LDIF → [(dn, {atributo: [valores]})] en el orden del texto.

    Los nombres de atributo conservan la grafía de la entrada.

    Raises:
        DiscoveryError: el texto no es LDIF válido
    """
    parser = LDIFParser(io.BytesIO(text.encode("utf-8")))
    try:
        return [(dn, dict(entry)) for dn, entry in parser.parse()]
    except ValueError as e:
        raise DiscoveryError(f"LDIF inválido: {e}") from e


# ---------- escritura ----------


def format_line(attr: str, value: str) -> str:
    if _UNSAFE_VALUE.search(value):
        encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
        return f"{attr}:: {encoded}"
    return f"{attr}: {value}"


def format_paragraph(lines: Iterable[Line]) -> str:
    return "\n".join(format_line(attr, value) for attr, value in lines) + "\n"


def render_add(dn: str, object_classes: Sequence[str], attributes: Iterable[Line]) -> str:
    lines: List[Line] = [("dn", dn), ("changetype", "add")]
    lines.extend(("objectClass", oc) for oc in object_classes)
    lines.extend(attributes)
    return format_paragraph(lines)


def render_modify(dn: str, replacements: Iterable[Tuple[str, Optional[str]]]) -> str:
    """
    Un bloque 'replace:' por atributo. Un valor None borra todos los valores del
    atributo (replace sin valores).
    """
    out = [format_line("dn", dn), "changetype: modify"]
    first = True
    for attr, value in replacements:
        if not first:
            out.append("-")
        first = False
        out.append(f"replace: {attr}")
        if value is not None:
            out.append(format_line(attr, value))
    out.append("-")
    return "\n".join(out) + "\n"


def render_delete(dn: str) -> str:
    return format_paragraph([("dn", dn), ("changetype", "delete")])

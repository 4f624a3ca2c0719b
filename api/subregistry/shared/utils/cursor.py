"""
Cursor de paginacion del listado de servidores.

Formato: "name:version". Los nombres validos no contienen ':', por lo que
se separa en el primer ':' y el resto pertenece a la version.
"""
from typing import Optional, Tuple

from subregistry.shared.exceptions.domain import InvalidCursorException


CURSOR_SEPARATOR = ":"

CursorKey = Tuple[str, str]


def encode_cursor(name: str, version: str) -> str:
    """Construye el cursor que apunta a la fila (name, version)."""
    return f"{name}{CURSOR_SEPARATOR}{version}"


def decode_cursor(cursor: Optional[str]) -> Optional[CursorKey]:
    """
    Decodifica un cursor a (name, version).

    Args:
        cursor: Cursor recibido del cliente (None o vacio = primera pagina)

    Returns:
        Optional[CursorKey]: Tupla (name, version) o None

    Raises:
        InvalidCursorException: Si falta el separador o el nombre esta vacio
    """
    if not cursor:
        return None
    name, sep, version = cursor.partition(CURSOR_SEPARATOR)
    if not sep or not name:
        raise InvalidCursorException(cursor)
    return name, version

"""
Mapeo de un registro upstream validado a una fila de `servers`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from subregistry.shared.constants.registry_constants import ServerStatus, Visibility

from .types import ValidRecord


# Columnas que el sync reemplaza completas en cada corrida
UPSTREAM_OWNED_COLUMNS: tuple[str, ...] = (
    "description",
    "status",
    "is_latest",
    "repository",
    "website_url",
    "packages",
    "remotes",
    "publisher_meta",
    "parent_registry_meta",
    "published_at",
    "source",
)

# Columnas que solo escribe la administracion; el update del sync no las toca
LOCALLY_OWNED_COLUMNS: tuple[str, ...] = ("version_registry_meta", "visibility")


def map_record_to_row(record: ValidRecord, *, source: str, now: datetime) -> dict[str, Any]:
    """
    Construye el dict de valores para el INSERT ... ON CONFLICT.

    - status: el del servidor, si no el del bloque oficial, si no active
    - published_at: el del bloque oficial, si no `now`
    - publisher_meta: `server._meta` del publicador
    - parent_registry_meta: `_meta` completo del wrapper upstream
    - version_registry_meta / visibility: valores iniciales (solo aplican al insert)
    """
    server = record.server
    return {
        "name": record.name,
        "version": record.version,
        "description": server.get("description"),
        "status": record.status or ServerStatus.ACTIVE.value,
        "is_latest": bool(record.is_latest),
        "repository": server.get("repository"),
        "website_url": server.get("websiteUrl") or None,
        "packages": server.get("packages"),
        "remotes": server.get("remotes"),
        "publisher_meta": dict(server.get("_meta") or {}),
        "parent_registry_meta": dict(record.registry_meta),
        "version_registry_meta": {},
        "visibility": Visibility.DRAFT.value,
        "published_at": record.published_at or now,
        "source": source,
        "created_at": now,
        "updated_at": now,
    }

"""
Composicion de la respuesta ServerJson a partir de una version y su paquete.

Dos superficies de metadata:
- server._meta: metadata del publicador, tal cual llega de upstream
- _meta del wrapper: overlay parent_registry_meta -> package.registry_meta
  -> version_registry_meta (merge superficial, la ultima capa gana)
"""
from typing import Any, Dict, Iterable, Mapping, Optional

from subregistry.infrastructure.database.models import PackageMetadataModel, ServerModel


def overlay(layers: Iterable[Optional[Mapping[str, Any]]]) -> Dict[str, Any]:
    """
    Merge superficial de capas en orden de precedencia creciente.

    Las capas None se ignoran y ninguna entrada se modifica.

    Args:
        layers: Capas ordenadas de menor a mayor precedencia

    Returns:
        Dict[str, Any]: Nuevo dict con el resultado
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


def compose_registry_meta(
    server: ServerModel, package: Optional[PackageMetadataModel]
) -> Dict[str, Any]:
    """Metadata de registro visible: upstream, luego paquete, luego version."""
    return overlay([
        server.parent_registry_meta,
        package.registry_meta if package is not None else None,
        server.version_registry_meta,
    ])


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


def compose_server_json(
    server: ServerModel, package: Optional[PackageMetadataModel] = None
) -> Dict[str, Any]:
    """
    Construye el ServerJson servido por la API.

    Los campos opcionales (repository, websiteUrl, packages, remotes) se
    omiten cuando no tienen valor.
    """
    body: Dict[str, Any] = {
        "name": server.name,
        "description": server.description,
        "version": server.version,
    }
    optional_fields = (
        ("repository", server.repository),
        ("websiteUrl", server.website_url),
        ("packages", server.packages),
        ("remotes", server.remotes),
    )
    for key, value in optional_fields:
        if not _is_absent(value):
            body[key] = value
    body["_meta"] = dict(server.publisher_meta or {})

    return {
        "server": body,
        "_meta": compose_registry_meta(server, package),
    }

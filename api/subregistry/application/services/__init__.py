"""
Servicios de aplicacion.

Logica reutilizable que no pertenece a un caso de uso especifico.
"""
from subregistry.application.services.metadata_composer import (
    compose_registry_meta,
    compose_server_json,
    overlay,
)

__all__ = [
    "overlay",
    "compose_registry_meta",
    "compose_server_json",
]

"""
Excepciones de dominio del registro.
"""
from typing import Any, Optional

from subregistry.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepcion base para errores de dominio (400 por defecto)."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepcion cuando no se encuentra una entidad."""

    def __init__(self, entity_name: str, entity_id: Any, error_code: str = "ENTITY_NOT_FOUND"):
        super().__init__(
            message=f"{entity_name} '{entity_id}' no encontrado",
            error_code=error_code,
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status_code = 404


class ServerNotFoundException(EntityNotFoundException):
    """No existe ninguna version (o la version pedida) para el servidor."""

    def __init__(self, name: str, version: Optional[str] = None):
        entity_id = f"{name}@{version}" if version else name
        super().__init__("Servidor", entity_id, error_code="SERVER_NOT_FOUND")
        self.details = {"name": name}
        if version:
            self.details["version"] = version


class PackageMetadataNotFoundException(EntityNotFoundException):
    """No hay enriquecimiento a nivel de paquete para el nombre dado."""

    def __init__(self, name: str):
        super().__init__("Metadata de paquete", name, error_code="PACKAGE_METADATA_NOT_FOUND")


class ValidationException(DomainException):
    """Excepcion para errores de validacion."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class InvalidCursorException(DomainException):
    """El cursor de paginacion no tiene el formato name:version."""

    def __init__(self, cursor: str):
        super().__init__(
            message=f"Cursor de paginacion invalido: '{cursor}'",
            error_code="INVALID_CURSOR",
            details={"cursor": cursor}
        )

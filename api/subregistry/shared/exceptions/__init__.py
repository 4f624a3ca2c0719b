"""
Excepciones de la aplicacion.
"""
from subregistry.shared.exceptions.base import AppException
from subregistry.shared.exceptions.domain import (
    DomainException,
    EntityNotFoundException,
    ServerNotFoundException,
    PackageMetadataNotFoundException,
    ValidationException,
    InvalidCursorException,
)

__all__ = [
    "AppException",
    "DomainException",
    "EntityNotFoundException",
    "ServerNotFoundException",
    "PackageMetadataNotFoundException",
    "ValidationException",
    "InvalidCursorException",
]

"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .registry_dto import ListMetadataDTO, ServerListResponseDTO, SyncTriggerResponseDTO
from .admin_dto import (
    MutationResponseDTO,
    PackageMetadataResponseDTO,
    SyncLogDTO,
    SyncStatusResponseDTO,
    VersionMetadataResponseDTO,
    VisibilityResponseDTO,
    VisibilityUpdateDTO,
)

__all__ = [
    "ListMetadataDTO",
    "ServerListResponseDTO",
    "SyncTriggerResponseDTO",
    "MutationResponseDTO",
    "PackageMetadataResponseDTO",
    "SyncLogDTO",
    "SyncStatusResponseDTO",
    "VersionMetadataResponseDTO",
    "VisibilityResponseDTO",
    "VisibilityUpdateDTO",
]

"""
DTOs de la superficie de administracion (enriquecimiento y visibilidad).
"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from subregistry.shared.constants.registry_constants import SyncStatus, Visibility


class VisibilityUpdateDTO(BaseModel):
    """Body de PATCH .../visibility."""

    visibility: Visibility = Field(..., description="draft o published")


class VisibilityResponseDTO(BaseModel):
    success: bool = True
    visibility: Visibility


class MutationResponseDTO(BaseModel):
    success: bool = True


class PackageMetadataResponseDTO(BaseModel):
    """Enriquecimiento a nivel de paquete."""

    name: str
    registryMeta: Dict[str, Any]
    visibility: Visibility
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class VersionMetadataResponseDTO(BaseModel):
    """Metadata local de una version."""

    name: str
    version: str
    versionRegistryMeta: Dict[str, Any]
    visibility: Visibility
    updatedAt: Optional[datetime] = None


class SyncLogDTO(BaseModel):
    """Fila del sync_log."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    source: str
    status: SyncStatus
    servers_processed: int
    error_message: Optional[str] = None
    synced_at: datetime


class SyncStatusResponseDTO(BaseModel):
    """Ultimas corridas de sincronizacion."""

    logs: List[SyncLogDTO]
    in_progress: bool = False

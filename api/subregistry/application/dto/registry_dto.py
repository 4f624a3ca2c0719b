"""
DTOs de la API de lectura del registro y del trigger de sincronizacion.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ListMetadataDTO(BaseModel):
    """Metadata de un listado paginado."""

    count: int = Field(..., description="Cantidad de servidores en esta pagina")
    nextCursor: Optional[str] = Field(
        None, description="Cursor de la siguiente pagina (name:version) o null si es la ultima"
    )


class ServerListResponseDTO(BaseModel):
    """Respuesta de GET /v0/servers y /v0/servers/{name}/versions."""

    servers: List[Dict[str, Any]] = Field(..., description="ServerJson de cada version")
    metadata: ListMetadataDTO


class SyncTriggerResponseDTO(BaseModel):
    """Resultado del trigger manual de sincronizacion."""

    success: bool
    message: str
    processed: int = 0
    skipped: int = 0
    full_sync: bool = False
    error: Optional[str] = None

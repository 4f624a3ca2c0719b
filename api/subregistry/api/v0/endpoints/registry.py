"""
Endpoints de lectura del registro (compatibles con la API v0 del registro MCP).

Los nombres de servidor tienen la forma "namespace/nombre"; los clientes los
envian codificados (a%2Fx) y llegan decodificados como dos segmentos de ruta.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from subregistry.application.dto.registry_dto import ServerListResponseDTO
from subregistry.application.use_cases.registry_use_cases import RegistryUseCases
from subregistry.api.v0.dependencies.use_case_deps import get_registry_use_cases
from subregistry.shared.constants.registry_constants import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    ServerStatus,
    Visibility,
)


router = APIRouter(prefix="/servers", tags=["Registry"])


def _server_name(namespace: str, server_name: str) -> str:
    return f"{namespace}/{server_name}"


@router.get(
    "",
    response_model=ServerListResponseDTO,
    summary="Listar todas las versiones de servidores"
)
async def list_servers(
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Tamano de pagina"),
    cursor: Optional[str] = Query(None, description="Cursor name:version de la pagina anterior"),
    visibility: Optional[Visibility] = Query(None, description="Filtra por visibilidad (version y paquete)"),
    status: Optional[ServerStatus] = Query(None, description="Filtra por status upstream"),
    use_cases: RegistryUseCases = Depends(get_registry_use_cases),
) -> ServerListResponseDTO:
    """
    Lista paginada de todas las versiones, ordenada por (name, version).

    Para obtener la siguiente pagina se envia `metadata.nextCursor` como `cursor`.
    """
    return await use_cases.list_servers(
        limit=limit, cursor=cursor, visibility=visibility, status=status
    )


@router.get(
    "/{namespace}/{server_name}/versions/{version}",
    summary="Obtener una version especifica"
)
async def get_server_version(
    namespace: str,
    server_name: str,
    version: str,
    use_cases: RegistryUseCases = Depends(get_registry_use_cases),
) -> Dict[str, Any]:
    """ServerJson de la version exacta, 404 si no existe."""
    return await use_cases.get_version(_server_name(namespace, server_name), version)


@router.get(
    "/{namespace}/{server_name}/versions",
    response_model=ServerListResponseDTO,
    summary="Listar versiones de un servidor"
)
async def list_server_versions(
    namespace: str,
    server_name: str,
    visibility: Optional[Visibility] = Query(None),
    status: Optional[ServerStatus] = Query(None),
    use_cases: RegistryUseCases = Depends(get_registry_use_cases),
) -> ServerListResponseDTO:
    """Todas las versiones, la publicada mas recientemente primero."""
    return await use_cases.list_versions(
        _server_name(namespace, server_name), visibility=visibility, status=status
    )


@router.get(
    "/{namespace}/{server_name}",
    summary="Obtener la ultima version de un servidor"
)
async def get_server(
    namespace: str,
    server_name: str,
    use_cases: RegistryUseCases = Depends(get_registry_use_cases),
) -> Dict[str, Any]:
    """ServerJson de la version marcada como latest, 404 si no hay."""
    return await use_cases.get_latest(_server_name(namespace, server_name))

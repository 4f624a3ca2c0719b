"""
Endpoints de administracion: estado del sync, enriquecimiento y visibilidad.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from subregistry.application.dto.admin_dto import (
    MutationResponseDTO,
    PackageMetadataResponseDTO,
    SyncStatusResponseDTO,
    VersionMetadataResponseDTO,
    VisibilityResponseDTO,
    VisibilityUpdateDTO,
)
from subregistry.application.use_cases.admin_use_cases import AdminUseCases
from subregistry.api.v0.dependencies.use_case_deps import get_admin_use_cases, get_sync_service
from subregistry.infrastructure.external.registry_sync.sync_lease import SyncLeaseManager
from subregistry.infrastructure.external.registry_sync.sync_service import RegistrySyncService


router = APIRouter(prefix="/admin", tags=["Admin"])

MetadataBody = Dict[str, Any]


def _server_name(namespace: str, server_name: str) -> str:
    return f"{namespace}/{server_name}"


@router.get("/sync/status", response_model=SyncStatusResponseDTO)
async def get_sync_status(
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
    sync_service: RegistrySyncService = Depends(get_sync_service),
):
    """
    Ultimas 10 corridas de sincronizacion y si hay una en curso.
    """
    return await use_cases.get_sync_status(
        in_progress=SyncLeaseManager.is_held(sync_service.source)
    )


# Metadata de version (rutas mas especificas primero)

@router.get(
    "/servers/{namespace}/{server_name}/versions/{version}/metadata",
    response_model=VersionMetadataResponseDTO,
)
async def get_version_metadata(
    namespace: str,
    server_name: str,
    version: str,
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Metadata local de una version."""
    return await use_cases.get_version_metadata(_server_name(namespace, server_name), version)


@router.put(
    "/servers/{namespace}/{server_name}/versions/{version}/metadata",
    response_model=MutationResponseDTO,
)
async def put_version_metadata(
    namespace: str,
    server_name: str,
    version: str,
    metadata: MetadataBody = Body(...),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Reemplaza la metadata de la version. La version debe existir."""
    await use_cases.put_version_metadata(_server_name(namespace, server_name), version, metadata)
    return MutationResponseDTO()


@router.patch(
    "/servers/{namespace}/{server_name}/versions/{version}/metadata",
    response_model=MutationResponseDTO,
)
async def patch_version_metadata(
    namespace: str,
    server_name: str,
    version: str,
    metadata: MetadataBody = Body(...),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Merge superficial sobre la metadata de la version."""
    await use_cases.patch_version_metadata(_server_name(namespace, server_name), version, metadata)
    return MutationResponseDTO()


@router.delete(
    "/servers/{namespace}/{server_name}/versions/{version}/metadata",
    response_model=MutationResponseDTO,
)
async def delete_version_metadata(
    namespace: str,
    server_name: str,
    version: str,
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Resetea la metadata de la version a {}."""
    await use_cases.delete_version_metadata(_server_name(namespace, server_name), version)
    return MutationResponseDTO()


@router.patch(
    "/servers/{namespace}/{server_name}/versions/{version}/visibility",
    response_model=VisibilityResponseDTO,
)
async def set_version_visibility(
    namespace: str,
    server_name: str,
    version: str,
    dto: VisibilityUpdateDTO,
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Cambia la visibilidad de una version concreta."""
    visibility = await use_cases.set_version_visibility(
        _server_name(namespace, server_name), version, dto.visibility
    )
    return VisibilityResponseDTO(visibility=visibility)


# Metadata de paquete

@router.get(
    "/servers/{namespace}/{server_name}/metadata",
    response_model=PackageMetadataResponseDTO,
)
async def get_package_metadata(
    namespace: str,
    server_name: str,
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Metadata compartida por todas las versiones del servidor."""
    return await use_cases.get_package_metadata(_server_name(namespace, server_name))


@router.put(
    "/servers/{namespace}/{server_name}/metadata",
    response_model=MutationResponseDTO,
)
async def put_package_metadata(
    namespace: str,
    server_name: str,
    metadata: MetadataBody = Body(...),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Crea o reemplaza la metadata del paquete."""
    await use_cases.put_package_metadata(_server_name(namespace, server_name), metadata)
    return MutationResponseDTO()


@router.patch(
    "/servers/{namespace}/{server_name}/metadata",
    response_model=MutationResponseDTO,
)
async def patch_package_metadata(
    namespace: str,
    server_name: str,
    metadata: MetadataBody = Body(...),
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Merge superficial; 404 si el paquete no tiene metadata."""
    await use_cases.patch_package_metadata(_server_name(namespace, server_name), metadata)
    return MutationResponseDTO()


@router.delete(
    "/servers/{namespace}/{server_name}/metadata",
    response_model=MutationResponseDTO,
)
async def delete_package_metadata(
    namespace: str,
    server_name: str,
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Elimina la metadata del paquete (la visibilidad vuelve a draft por defecto)."""
    await use_cases.delete_package_metadata(_server_name(namespace, server_name))
    return MutationResponseDTO()


@router.patch(
    "/servers/{namespace}/{server_name}/visibility",
    response_model=VisibilityResponseDTO,
)
async def set_package_visibility(
    namespace: str,
    server_name: str,
    dto: VisibilityUpdateDTO,
    use_cases: AdminUseCases = Depends(get_admin_use_cases),
):
    """Visibilidad del paquete (crea la fila si no existe)."""
    visibility = await use_cases.set_package_visibility(
        _server_name(namespace, server_name), dto.visibility
    )
    return VisibilityResponseDTO(visibility=visibility)

"""
Casos de uso de administracion: enriquecimiento local y visibilidad.

Son los unicos escritores de package_metadata y de los campos locales de
`servers` (version_registry_meta, visibility).
"""
from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.application.dto.admin_dto import (
    PackageMetadataResponseDTO,
    SyncLogDTO,
    SyncStatusResponseDTO,
    VersionMetadataResponseDTO,
)
from subregistry.infrastructure.database.models import ServerModel
from subregistry.infrastructure.repositories.package_metadata_repository import PackageMetadataRepository
from subregistry.infrastructure.repositories.server_repository import ServerRepository
from subregistry.infrastructure.repositories.sync_log_repository import SyncLogRepository
from subregistry.shared.constants.registry_constants import SYNC_STATUS_HISTORY, Visibility
from subregistry.shared.exceptions.domain import (
    PackageMetadataNotFoundException,
    ServerNotFoundException,
)


class AdminUseCases:
    """
    Gestiona la curacion local del registro.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.server_repo = ServerRepository(db)
        self.package_repo = PackageMetadataRepository(db)
        self.sync_log_repo = SyncLogRepository(db)

    async def get_sync_status(self, *, in_progress: bool = False) -> SyncStatusResponseDTO:
        """Ultimas corridas del sync_log."""
        logs = await self.sync_log_repo.list_recent(limit=SYNC_STATUS_HISTORY)
        return SyncStatusResponseDTO(
            logs=[SyncLogDTO.model_validate(log) for log in logs],
            in_progress=in_progress,
        )

    # Paquete

    async def get_package_metadata(self, name: str) -> PackageMetadataResponseDTO:
        pkg = await self.package_repo.get(name)
        if pkg is None:
            raise PackageMetadataNotFoundException(name)
        return PackageMetadataResponseDTO(
            name=pkg.name,
            registryMeta=pkg.registry_meta or {},
            visibility=pkg.visibility,
            createdAt=pkg.created_at,
            updatedAt=pkg.updated_at,
        )

    async def put_package_metadata(self, name: str, registry_meta: Dict[str, Any]) -> None:
        """Crea o reemplaza la metadata de registro del paquete."""
        await self.package_repo.upsert_registry_meta(name, registry_meta)
        await self.db.commit()

    async def patch_package_metadata(self, name: str, patch: Dict[str, Any]) -> None:
        """Merge superficial; el paquete debe tener fila previa."""
        updated = await self.package_repo.merge_registry_meta(name, patch)
        if updated is None:
            raise PackageMetadataNotFoundException(name)
        await self.db.commit()

    async def delete_package_metadata(self, name: str) -> None:
        """Elimina la fila del paquete (idempotente)."""
        deleted = await self.package_repo.delete(name)
        if not deleted:
            logger.info(f"Metadata de paquete inexistente, nada que eliminar: {name}")
        await self.db.commit()

    async def set_package_visibility(self, name: str, visibility: Visibility) -> Visibility:
        pkg = await self.package_repo.set_visibility(name, visibility)
        await self.db.commit()
        return Visibility(pkg.visibility)

    # Version

    async def _require_version(self, name: str, version: str) -> ServerModel:
        server = await self.server_repo.get_model(name, version)
        if server is None:
            raise ServerNotFoundException(name, version)
        return server

    async def get_version_metadata(self, name: str, version: str) -> VersionMetadataResponseDTO:
        server = await self._require_version(name, version)
        return VersionMetadataResponseDTO(
            name=server.name,
            version=server.version,
            versionRegistryMeta=server.version_registry_meta or {},
            visibility=server.visibility,
            updatedAt=server.updated_at,
        )

    async def put_version_metadata(
        self, name: str, version: str, registry_meta: Dict[str, Any]
    ) -> None:
        """Reemplaza la metadata propia de la version (debe existir)."""
        await self._require_version(name, version)
        await self.server_repo.set_version_registry_meta(name, version, registry_meta)
        await self.db.commit()

    async def patch_version_metadata(
        self, name: str, version: str, patch: Dict[str, Any]
    ) -> None:
        """Merge superficial sobre la metadata de la version."""
        server = await self._require_version(name, version)
        merged = {**(server.version_registry_meta or {}), **patch}
        await self.server_repo.set_version_registry_meta(name, version, merged)
        await self.db.commit()

    async def delete_version_metadata(self, name: str, version: str) -> None:
        """Vuelve la metadata de la version a {}."""
        await self._require_version(name, version)
        await self.server_repo.set_version_registry_meta(name, version, {})
        await self.db.commit()

    async def set_version_visibility(
        self, name: str, version: str, visibility: Visibility
    ) -> Visibility:
        server: Optional[ServerModel] = await self.server_repo.set_version_visibility(
            name, version, visibility
        )
        if server is None:
            raise ServerNotFoundException(name, version)
        await self.db.commit()
        return Visibility(server.visibility)

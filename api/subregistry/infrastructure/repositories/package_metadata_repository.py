"""
Repositorio de enriquecimiento a nivel de paquete (tabla package_metadata).
"""
from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.infrastructure.database.models import PackageMetadataModel
from subregistry.shared.constants.registry_constants import Visibility
from subregistry.shared.utils.datetime_utils import DateTimeUtils


class PackageMetadataRepository:
    """
    Gestiona la tabla package_metadata.
    Unico escritor: la superficie de administracion.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, name: str) -> Optional[PackageMetadataModel]:
        """Obtiene el enriquecimiento de un paquete."""
        return await self.db.get(PackageMetadataModel, name)

    async def upsert_registry_meta(
        self, name: str, registry_meta: Dict[str, Any]
    ) -> PackageMetadataModel:
        """
        Crea o reemplaza la metadata de registro del paquete.
        Una fila nueva nace con visibilidad draft.
        """
        existing = await self.get(name)
        if existing:
            existing.registry_meta = dict(registry_meta)
            existing.updated_at = DateTimeUtils.now_utc()
        else:
            existing = PackageMetadataModel(
                name=name,
                registry_meta=dict(registry_meta),
                visibility=Visibility.DRAFT.value,
            )
            self.db.add(existing)

        await self.db.flush()
        logger.info(f"Metadata de paquete guardada: {name}")
        return existing

    async def merge_registry_meta(
        self, name: str, patch: Dict[str, Any]
    ) -> Optional[PackageMetadataModel]:
        """
        Merge superficial sobre la metadata existente.

        Returns:
            Optional[PackageMetadataModel]: None si el paquete no tiene fila
        """
        existing = await self.get(name)
        if existing is None:
            return None
        existing.registry_meta = {**(existing.registry_meta or {}), **patch}
        existing.updated_at = DateTimeUtils.now_utc()
        await self.db.flush()
        logger.info(f"Metadata de paquete actualizada (merge): {name}")
        return existing

    async def set_visibility(self, name: str, visibility: Visibility) -> PackageMetadataModel:
        """Crea o actualiza la visibilidad del paquete."""
        value = Visibility(visibility).value
        existing = await self.get(name)
        if existing:
            existing.visibility = value
            existing.updated_at = DateTimeUtils.now_utc()
        else:
            existing = PackageMetadataModel(name=name, registry_meta={}, visibility=value)
            self.db.add(existing)

        await self.db.flush()
        logger.info(f"Visibilidad del paquete {name} -> {value}")
        return existing

    async def delete(self, name: str) -> bool:
        """Elimina la fila del paquete. False si no existia."""
        existing = await self.get(name)
        if existing is None:
            return False
        await self.db.delete(existing)
        await self.db.flush()
        logger.info(f"Metadata de paquete eliminada: {name}")
        return True

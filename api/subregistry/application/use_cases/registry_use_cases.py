"""
Casos de uso de la API de lectura del registro.
"""
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.application.dto.registry_dto import ListMetadataDTO, ServerListResponseDTO
from subregistry.application.services.metadata_composer import compose_server_json
from subregistry.infrastructure.repositories.server_repository import ServerRepository
from subregistry.shared.constants.registry_constants import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    ServerStatus,
    Visibility,
)
from subregistry.shared.exceptions.domain import ServerNotFoundException, ValidationException
from subregistry.shared.utils.cursor import decode_cursor


class RegistryUseCases:
    """
    Listado paginado y consultas puntuales, ya compuestos como ServerJson.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.server_repo = ServerRepository(db)

    async def list_servers(
        self,
        *,
        limit: int = DEFAULT_PAGE_LIMIT,
        cursor: Optional[str] = None,
        visibility: Optional[Visibility] = None,
        status: Optional[ServerStatus] = None,
    ) -> ServerListResponseDTO:
        """
        Lista todas las versiones en orden (name, version) con cursor.

        Raises:
            ValidationException: limit fuera de 1..100
            InvalidCursorException: cursor sin formato name:version
        """
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            raise ValidationException(f"limit debe estar entre 1 y {MAX_PAGE_LIMIT}", field="limit")

        page = await self.server_repo.list_page(
            limit=limit,
            after=decode_cursor(cursor),
            visibility=visibility,
            status=status,
        )
        servers = [compose_server_json(server, pkg) for server, pkg in page.rows]
        return ServerListResponseDTO(
            servers=servers,
            metadata=ListMetadataDTO(count=len(servers), nextCursor=page.next_cursor),
        )

    async def get_latest(self, name: str) -> Dict[str, Any]:
        """ServerJson de la version latest. 404 si no hay ninguna."""
        row = await self.server_repo.get_latest(name)
        if row is None:
            raise ServerNotFoundException(name)
        return compose_server_json(*row)

    async def list_versions(
        self,
        name: str,
        *,
        visibility: Optional[Visibility] = None,
        status: Optional[ServerStatus] = None,
    ) -> ServerListResponseDTO:
        """Todas las versiones, la publicada mas recientemente primero. 404 si no hay."""
        rows = await self.server_repo.list_versions(name, visibility=visibility, status=status)
        if not rows:
            raise ServerNotFoundException(name)
        servers = [compose_server_json(server, pkg) for server, pkg in rows]
        return ServerListResponseDTO(
            servers=servers,
            metadata=ListMetadataDTO(count=len(servers), nextCursor=None),
        )

    async def get_version(self, name: str, version: str) -> Dict[str, Any]:
        """ServerJson de una version exacta. 404 si no existe."""
        row = await self.server_repo.get_version(name, version)
        if row is None:
            raise ServerNotFoundException(name, version)
        return compose_server_json(*row)

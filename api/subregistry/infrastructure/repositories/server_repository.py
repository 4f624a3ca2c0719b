"""
Repositorio de versiones de servidores (lecturas paginadas y mutaciones locales).
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.infrastructure.database.models import PackageMetadataModel, ServerModel
from subregistry.shared.constants.registry_constants import Visibility
from subregistry.shared.utils.cursor import CursorKey, encode_cursor
from subregistry.shared.utils.datetime_utils import DateTimeUtils


# Una version junto con el enriquecimiento de su paquete (si existe)
ServerRow = Tuple[ServerModel, Optional[PackageMetadataModel]]


@dataclass(frozen=True)
class ServerPage:
    """Pagina del listado ordenado por (name, version)."""

    rows: List[ServerRow]
    next_cursor: Optional[str]


class ServerRepository:
    """
    Acceso a la tabla `servers` con LEFT JOIN a `package_metadata`.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self):
        return select(ServerModel, PackageMetadataModel).outerjoin(
            PackageMetadataModel, PackageMetadataModel.name == ServerModel.name
        )

    @staticmethod
    def _filter_conditions(
        visibility: Optional[Visibility],
        status: Optional[str],
    ) -> list:
        """
        Condiciones de filtro comunes a listado y versiones.

        La visibilidad exige que coincidan la version y el paquete; un paquete
        sin fila en package_metadata cuenta como draft.
        """
        conditions = []
        if visibility is not None:
            value = Visibility(visibility).value
            conditions.append(ServerModel.visibility == value)
            conditions.append(
                func.coalesce(PackageMetadataModel.visibility, Visibility.DRAFT.value) == value
            )
        if status is not None:
            conditions.append(ServerModel.status == str(getattr(status, "value", status)))
        return conditions

    async def list_page(
        self,
        *,
        limit: int,
        after: Optional[CursorKey] = None,
        visibility: Optional[Visibility] = None,
        status: Optional[str] = None,
    ) -> ServerPage:
        """
        Lista una pagina de versiones en orden (name ASC, version ASC).

        Args:
            limit: Tamano de pagina (ya validado a 1..100)
            after: Clave (name, version) decodificada del cursor; la fila
                del cursor nunca se incluye
            visibility: Filtro de visibilidad (version Y paquete)
            status: Filtro de status de la version

        Returns:
            ServerPage: filas de la pagina y cursor de la siguiente (o None)
        """
        conditions = self._filter_conditions(visibility, status)
        if after is not None:
            after_name, after_version = after
            conditions.append(
                or_(
                    ServerModel.name > after_name,
                    and_(ServerModel.name == after_name, ServerModel.version > after_version),
                )
            )

        query = (
            self._base_query()
            .where(*conditions)
            .order_by(ServerModel.name.asc(), ServerModel.version.asc())
            .limit(limit + 1)
        )
        result = await self.db.execute(query)
        rows: List[ServerRow] = [(server, pkg) for server, pkg in result.all()]

        next_cursor = None
        if len(rows) > limit:
            rows = rows[:limit]
            last = rows[-1][0]
            next_cursor = encode_cursor(last.name, last.version)

        return ServerPage(rows=rows, next_cursor=next_cursor)

    async def get_latest(self, name: str) -> Optional[ServerRow]:
        """
        Version marcada como latest por upstream.

        Si upstream envio mas de una, se devuelve la publicada mas recientemente.
        """
        query = (
            self._base_query()
            .where(ServerModel.name == name, ServerModel.is_latest.is_(True))
            .order_by(ServerModel.published_at.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        row = result.first()
        return (row[0], row[1]) if row else None

    async def get_version(self, name: str, version: str) -> Optional[ServerRow]:
        """Version exacta (name, version)."""
        query = self._base_query().where(
            ServerModel.name == name, ServerModel.version == version
        )
        result = await self.db.execute(query)
        row = result.first()
        return (row[0], row[1]) if row else None

    async def list_versions(
        self,
        name: str,
        *,
        visibility: Optional[Visibility] = None,
        status: Optional[str] = None,
    ) -> List[ServerRow]:
        """Todas las versiones de un servidor, la publicada mas recientemente primero."""
        conditions = [ServerModel.name == name]
        conditions.extend(self._filter_conditions(visibility, status))
        query = (
            self._base_query()
            .where(*conditions)
            .order_by(ServerModel.published_at.desc(), ServerModel.version.desc())
        )
        result = await self.db.execute(query)
        return [(server, pkg) for server, pkg in result.all()]

    async def get_model(self, name: str, version: str) -> Optional[ServerModel]:
        """Fila de la version sin join (para mutaciones)."""
        return await self.db.get(ServerModel, (name, version))

    async def set_version_registry_meta(
        self, name: str, version: str, registry_meta: Dict[str, Any]
    ) -> Optional[ServerModel]:
        """
        Reemplaza la metadata de registro propia de la version.

        Returns:
            Optional[ServerModel]: La version actualizada o None si no existe
        """
        server = await self.get_model(name, version)
        if server is None:
            return None
        server.version_registry_meta = dict(registry_meta)
        server.updated_at = DateTimeUtils.now_utc()
        await self.db.flush()
        logger.info(f"Metadata de version actualizada: {name}@{version}")
        return server

    async def set_version_visibility(
        self, name: str, version: str, visibility: Visibility
    ) -> Optional[ServerModel]:
        """Cambia la visibilidad de una version. None si no existe."""
        server = await self.get_model(name, version)
        if server is None:
            return None
        server.visibility = Visibility(visibility).value
        server.updated_at = DateTimeUtils.now_utc()
        await self.db.flush()
        logger.info(f"Visibilidad de {name}@{version} -> {server.visibility}")
        return server

    async def find_names_with_multiple_latest(self) -> List[str]:
        """
        Nombres con mas de una version marcada is_latest.
        Upstream deberia garantizar una sola; aqui solo se detecta.
        """
        query = (
            select(ServerModel.name)
            .where(ServerModel.is_latest.is_(True))
            .group_by(ServerModel.name)
            .having(func.count() > 1)
            .order_by(ServerModel.name)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

"""
Reconciliacion: upsert de versiones upstream respetando la propiedad de campos.

Por cada registro, clave (name, version):
- si no existe: INSERT con todos los campos upstream, version_registry_meta={}
  y visibility=draft
- si existe: reemplazo completo de los campos upstream, updated_at=now;
  version_registry_meta, visibility y created_at no se tocan

El Reconciler nunca hace commit: todas las sentencias van en la transaccion
de quien lo invoca, junto con la fila del sync_log.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, Optional, Sequence

from loguru import logger
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.infrastructure.database.models import ServerModel
from subregistry.shared.constants.registry_constants import DEFAULT_SYNC_SOURCE
from subregistry.shared.utils.datetime_utils import DateTimeUtils

from .mapper import UPSTREAM_OWNED_COLUMNS, map_record_to_row
from .types import ReconcileResult, ValidRecord


_INSERT_BY_DIALECT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def find_latest_conflicts(records: Iterable[ValidRecord]) -> list[str]:
    """Nombres que en un mismo lote traen mas de una version con isLatest=true."""
    counts = Counter(r.name for r in records if r.is_latest)
    return sorted(name for name, count in counts.items() if count > 1)


class Reconciler:
    """
    Aplica un lote de registros validos sobre la tabla `servers`.
    """

    def __init__(self, *, source: str = DEFAULT_SYNC_SOURCE) -> None:
        self._source = source

    def build_upsert(self, dialect_name: str, row: dict):
        """
        Sentencia INSERT ... ON CONFLICT (name, version) DO UPDATE.

        El SET solo contiene columnas propiedad de upstream mas updated_at.
        """
        insert = _INSERT_BY_DIALECT.get(dialect_name)
        if insert is None:
            raise ValueError(f"Dialecto no soportado para upsert: {dialect_name}")

        stmt = insert(ServerModel.__table__).values(**row)
        update_set = {column: stmt.excluded[column] for column in UPSTREAM_OWNED_COLUMNS}
        update_set["updated_at"] = row["updated_at"]
        return stmt.on_conflict_do_update(
            index_elements=[ServerModel.__table__.c.name, ServerModel.__table__.c.version],
            set_=update_set,
        )

    async def reconcile(
        self,
        session: AsyncSession,
        records: Sequence[ValidRecord],
        *,
        now: Optional[datetime] = None,
    ) -> ReconcileResult:
        """
        Ejecuta un upsert por registro dentro de la transaccion de `session`.

        Args:
            session: Sesion con la transaccion abierta de la corrida
            records: Registros ya validados
            now: Instante para created_at/updated_at (default: ahora UTC)

        Returns:
            ReconcileResult: cantidad procesada y nombres con isLatest duplicado
        """
        now = now or DateTimeUtils.now_utc()
        dialect_name = session.get_bind().dialect.name

        conflicts = find_latest_conflicts(records)
        for name in conflicts:
            logger.warning(
                f"Upstream envio mas de una version isLatest=true para '{name}'; "
                f"se guardan tal cual"
            )

        processed = 0
        for record in records:
            row = map_record_to_row(record, source=self._source, now=now)
            await session.execute(self.build_upsert(dialect_name, row))
            processed += 1

        logger.info(f"Reconciliacion: {processed} versiones upsert (source={self._source})")
        return ReconcileResult(processed=processed, latest_conflicts=conflicts)

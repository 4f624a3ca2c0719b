"""
Ledger append-only de corridas de sincronizacion (tabla sync_log).
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.infrastructure.database.models import SyncLogModel
from subregistry.shared.constants.registry_constants import SyncStatus
from subregistry.shared.utils.datetime_utils import DateTimeUtils


class SyncLogRepository:
    """
    Lecturas del watermark y escritura de corridas.

    Las filas nunca se actualizan ni se borran. `record_run` solo agrega la
    fila a la sesion: el commit lo decide quien orquesta la corrida.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def last_successful_watermark(self, source: str) -> Optional[datetime]:
        """
        Mayor synced_at entre las corridas exitosas del source.

        Returns:
            Optional[datetime]: watermark en UTC o None (bootstrap, full fetch)
        """
        query = select(func.max(SyncLogModel.synced_at)).where(
            SyncLogModel.source == source,
            SyncLogModel.status == SyncStatus.SUCCESS.value,
        )
        result = await self.db.execute(query)
        watermark = result.scalar_one_or_none()
        return DateTimeUtils.ensure_utc(watermark) if watermark else None

    async def record_run(
        self,
        *,
        source: str,
        status: SyncStatus,
        servers_processed: int,
        synced_at: datetime,
        error_message: Optional[str] = None,
    ) -> SyncLogModel:
        """Agrega la fila de la corrida a la transaccion actual."""
        entry = SyncLogModel(
            source=source,
            status=SyncStatus(status).value,
            servers_processed=servers_processed,
            error_message=error_message,
            synced_at=DateTimeUtils.ensure_utc(synced_at),
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def list_recent(self, limit: int = 10, source: Optional[str] = None) -> List[SyncLogModel]:
        """Ultimas corridas, la mas reciente primero."""
        query = select(SyncLogModel)
        if source:
            query = query.where(SyncLogModel.source == source)
        query = query.order_by(SyncLogModel.synced_at.desc(), SyncLogModel.id.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

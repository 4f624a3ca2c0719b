"""
Servicio de sincronizacion registro upstream -> base local.

Diseno (resumen):
- Lease single-flight por source (sin corridas solapadas)
- Watermark = synced_at de la ultima corrida exitosa (sync_log)
- Fetch paginado incremental (updated_since) o completo (full_sync)
- Validacion por registro: los invalidos se omiten y se cuentan
- Upserts + fila success del sync_log en UNA transaccion
- Cualquier fallo: rollback y fila failure en una transaccion aparte

El watermark que se guarda es el instante de inicio de la corrida, asi los
cambios upstream que ocurren durante el fetch se vuelven a pedir la proxima vez.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from datetime import datetime
from typing import Optional

from loguru import logger

from subregistry.infrastructure.database.session import Database
from subregistry.infrastructure.repositories.server_repository import ServerRepository
from subregistry.infrastructure.repositories.sync_log_repository import SyncLogRepository
from subregistry.shared.constants.registry_constants import DEFAULT_SYNC_SOURCE, SyncStatus
from subregistry.shared.utils.datetime_utils import DateTimeUtils

from .reconciler import Reconciler
from .registry_client import UpstreamRegistryClient
from .sync_lease import DEFAULT_LEASE_TIMEOUT, SyncLeaseManager, SyncLeaseTimeoutError
from .types import SyncResult, ValidRecord
from .validator import RecordValidator


MAX_ERROR_MESSAGE_LENGTH = 2000


class SyncRunTimeoutError(RuntimeError):
    """La corrida excedio su tiempo maximo."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"La sincronizacion excedio el tiempo maximo de {timeout}s")


class RegistrySyncService:
    """
    Orquestador de una corrida de sincronizacion.
    """

    def __init__(
        self,
        *,
        database: Database,
        client: UpstreamRegistryClient,
        validator: Optional[RecordValidator] = None,
        reconciler: Optional[Reconciler] = None,
        source: str = DEFAULT_SYNC_SOURCE,
        lease_timeout_s: float = DEFAULT_LEASE_TIMEOUT,
        run_timeout_s: Optional[float] = None,
    ) -> None:
        self._database = database
        self._client = client
        self._validator = validator or RecordValidator()
        self._reconciler = reconciler or Reconciler(source=source)
        self._source = source
        self._lease_timeout_s = lease_timeout_s
        self._run_timeout_s = run_timeout_s

    @property
    def source(self) -> str:
        return self._source

    async def run_once(self, *, full_sync: bool = False) -> SyncResult:
        """
        Ejecuta una corrida completa. Nunca lanza: los fallos se devuelven
        como SyncResult(success=False) y quedan registrados en el sync_log.

        Args:
            full_sync: Si True ignora el watermark y pide todo el feed
        """
        started_at = DateTimeUtils.now_utc()
        try:
            async with SyncLeaseManager.lease(self._source, timeout=self._lease_timeout_s):
                started_at = DateTimeUtils.now_utc()
                run = self._run(started_at=started_at, full_sync=full_sync)
                if self._run_timeout_s and self._run_timeout_s > 0:
                    try:
                        return await asyncio.wait_for(run, timeout=self._run_timeout_s)
                    except asyncio.TimeoutError as e:
                        raise SyncRunTimeoutError(self._run_timeout_s) from e
                return await run
        except SyncLeaseTimeoutError as e:
            error = str(e)
            logger.warning(f"Sync omitido: {error}")
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(f"Sync fallido ({self._source}): {error}")

        await self._record_failure(started_at=started_at, error=error)
        return SyncResult(
            success=False,
            processed=0,
            error=error,
            started_at=started_at,
            full_sync=full_sync,
        )

    async def _load_watermark(self, full_sync: bool) -> Optional[datetime]:
        if full_sync:
            logger.info("Full sync solicitado: se ignora el watermark")
            return None
        async with self._database.session() as session:
            return await SyncLogRepository(session).last_successful_watermark(self._source)

    async def _fetch_valid_records(self, watermark: Optional[datetime]) -> tuple[list[ValidRecord], int]:
        """Consume el feed completo y separa validos de invalidos."""
        valid: list[ValidRecord] = []
        skipped = 0
        async with aclosing(self._client.fetch_since(watermark)) as feed:
            async for raw in feed:
                outcome = self._validator.validate(raw)
                if outcome.ok:
                    valid.append(outcome.record)
                else:
                    skipped += 1

        if skipped:
            logger.warning(f"Se omitieron {skipped} registro(s) invalido(s) del feed upstream")
        return valid, skipped

    async def _run(self, *, started_at: datetime, full_sync: bool) -> SyncResult:
        watermark = await self._load_watermark(full_sync)
        records, skipped = await self._fetch_valid_records(watermark)

        async with self._database.session() as session:
            try:
                result = await self._reconciler.reconcile(session, records)
                stored_conflicts = await ServerRepository(session).find_names_with_multiple_latest()
                await SyncLogRepository(session).record_run(
                    source=self._source,
                    status=SyncStatus.SUCCESS,
                    servers_processed=result.processed,
                    synced_at=started_at,
                )
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        if stored_conflicts:
            logger.warning(
                f"Servidores con mas de una version isLatest=true: {', '.join(stored_conflicts)}"
            )

        logger.success(
            f"Sync completado ({self._source}): procesados={result.processed}, "
            f"omitidos={skipped}, watermark={started_at.isoformat()}"
        )
        return SyncResult(
            success=True,
            processed=result.processed,
            skipped=skipped,
            watermark=started_at,
            started_at=started_at,
            full_sync=full_sync,
            latest_conflicts=sorted(set(result.latest_conflicts) | set(stored_conflicts)),
        )

    async def _record_failure(self, *, started_at: datetime, error: str) -> None:
        """Registra la corrida fallida en su propia transaccion."""
        try:
            async with self._database.session() as session:
                await SyncLogRepository(session).record_run(
                    source=self._source,
                    status=SyncStatus.FAILURE,
                    servers_processed=0,
                    synced_at=started_at,
                    error_message=error[:MAX_ERROR_MESSAGE_LENGTH],
                )
                await session.commit()
        except Exception as e:
            # El resultado ya refleja el fallo; el ledger queda sin la fila
            logger.error(f"No se pudo registrar la corrida fallida en sync_log: {e}")


def build_registry_sync_service(database: Database, config) -> RegistrySyncService:
    """
    Construye el servicio a partir de la configuracion de la aplicacion.

    Args:
        database: Database de la aplicacion
        config: Settings (o cualquier objeto con los mismos atributos)
    """
    client = UpstreamRegistryClient(
        base_url=config.UPSTREAM_BASE_URL,
        timeout_s=config.UPSTREAM_TIMEOUT_SECONDS,
        page_limit=config.UPSTREAM_PAGE_LIMIT,
        user_agent=f"{config.APP_NAME}/{config.APP_VERSION}",
    )
    return RegistrySyncService(
        database=database,
        client=client,
        source=config.SYNC_SOURCE,
        lease_timeout_s=config.SYNC_LOCK_TIMEOUT_SECONDS,
        run_timeout_s=config.SYNC_RUN_TIMEOUT_SECONDS,
    )

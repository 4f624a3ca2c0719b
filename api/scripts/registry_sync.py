"""
CLI: registro MCP oficial -> base local (sync one-way).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer) cuando el scheduler de la API
    esta deshabilitado (SYNC_SCHEDULER_ENABLED=false).

Variables de entorno relevantes:
  - DATABASE_URL
  - UPSTREAM_BASE_URL, UPSTREAM_TIMEOUT_SECONDS
  - SYNC_SOURCE, SYNC_LOCK_TIMEOUT_SECONDS, SYNC_RUN_TIMEOUT_SECONDS

Ejecucion:
  python scripts/registry_sync.py
  python scripts/registry_sync.py --full
  python scripts/registry_sync.py --status
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))
load_dotenv(_API_ROOT / ".env", override=False)

from subregistry.core.config import Settings
from subregistry.infrastructure.database.session import Database
from subregistry.infrastructure.external.registry_sync.sync_service import build_registry_sync_service
from subregistry.infrastructure.repositories.sync_log_repository import SyncLogRepository


async def _print_status(database: Database, limit: int) -> None:
    async with database.session() as session:
        logs = await SyncLogRepository(session).list_recent(limit=limit)
    if not logs:
        logger.info("Sin corridas registradas")
    for log in logs:
        line = (
            f"#{log.id} {log.synced_at.isoformat()} {log.source} {log.status} "
            f"procesados={log.servers_processed}"
        )
        if log.error_message:
            line += f" error={log.error_message}"
        logger.info(line)


async def _run(args: argparse.Namespace) -> int:
    config = Settings()
    database = Database(config.DATABASE_URL, echo=config.DEBUG)
    try:
        if args.create_tables:
            await database.create_all()

        if args.status:
            await _print_status(database, args.limit)
            return 0

        service = build_registry_sync_service(database, config)
        logger.info(f"Iniciando sync {'completo' if args.full else 'incremental'} desde {config.UPSTREAM_BASE_URL}")
        result = await service.run_once(full_sync=args.full)

        if not result.success:
            logger.error(f"Sync fallido: {result.error}")
            return 1

        logger.info(
            f"Sync OK: procesados={result.processed}, omitidos={result.skipped}, "
            f"watermark={result.watermark.isoformat() if result.watermark else None}"
        )
        return 0
    finally:
        await database.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Sincroniza el registro MCP oficial")
    parser.add_argument(
        "--full",
        action="store_true",
        help="Ignora el watermark y pide el feed completo.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Solo muestra las ultimas corridas del sync_log.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Cantidad de corridas a mostrar con --status.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Crea las tablas si no existen (desarrollo).",
    )
    args = parser.parse_args()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())

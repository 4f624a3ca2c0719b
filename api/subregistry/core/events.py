"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI
from loguru import logger

from subregistry.core.config import Settings


SYNC_JOB_ID = "registry_sync"


async def run_scheduled_sync(app: FastAPI) -> None:
    """Job del scheduler: una corrida incremental."""
    result = await app.state.sync_service.run_once()
    if result.success:
        logger.info(f"Sync programado completado: {result.processed} procesados")
    else:
        logger.error(f"Sync programado fallido: {result.error}")


def _build_scheduler(app: FastAPI, config: Settings) -> AsyncIOScheduler:
    """Scheduler con el sync diario (por defecto 02:00 UTC)."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_scheduled_sync,
        trigger=CronTrigger(hour=config.SYNC_CRON_HOUR, minute=0, timezone="UTC"),
        args=[app],
        id=SYNC_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


def _validate_config(config: Settings) -> None:
    """Advierte sobre configuraciones sospechosas."""
    warnings = []

    if config.DATABASE_URL.startswith("sqlite") and not config.is_development:
        warnings.append("DATABASE_URL apunta a SQLite fuera de desarrollo")
    if not 0 <= config.SYNC_CRON_HOUR <= 23:
        warnings.append(f"SYNC_CRON_HOUR invalido ({config.SYNC_CRON_HOUR}); el scheduler no arrancara")
    if config.SYNC_LOCK_TIMEOUT_SECONDS <= 0:
        warnings.append("SYNC_LOCK_TIMEOUT_SECONDS <= 0: una corrida concurrente falla sin esperar")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def startup_handler(app: FastAPI, config: Settings) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI (con database y sync_service en app.state)
        config: Configuracion de la aplicacion

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.info(f"Iniciando {config.APP_NAME} v{config.APP_VERSION}")
            logger.info(f"Entorno: {config.ENVIRONMENT}")

            _validate_config(config)

            app.state.log_sink_id = logger.add(
                config.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=config.LOG_LEVEL
            )

            if config.DB_CREATE_ALL:
                await app.state.database.create_all()
                logger.info("Base de datos inicializada (create_all)")

            app.state.scheduler = None
            if config.SYNC_SCHEDULER_ENABLED and 0 <= config.SYNC_CRON_HOUR <= 23:
                scheduler = _build_scheduler(app, config)
                scheduler.start()
                app.state.scheduler = scheduler
                logger.info(f"Sync programado diariamente a las {config.SYNC_CRON_HOUR:02d}:00 UTC")

            logger.success("Aplicacion iniciada correctamente")

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        scheduler = getattr(app.state, "scheduler", None)
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.info("Scheduler detenido")

        await app.state.database.dispose()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

        sink_id = getattr(app.state, "log_sink_id", None)
        if sink_id is not None:
            logger.remove(sink_id)
            app.state.log_sink_id = None

    return shutdown


def lifespan_handler(config: Settings) -> Callable[[FastAPI], AsyncContextManager[None]]:
    """
    Ciclo de vida de la aplicacion: startup al entrar, shutdown al salir.

    Args:
        config: Configuracion de la aplicacion

    Returns:
        Callable: Context manager async para `FastAPI(lifespan=...)`
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await startup_handler(app, config)()
        try:
            yield
        finally:
            await shutdown_handler(app)()

    return lifespan

"""
Lease single-flight para corridas de sincronizacion.

Una corrida manual (/internal/sync o CLI) puede solaparse con la programada;
sin exclusion ambas procesarian la misma ventana del watermark. El lease
serializa las corridas por `source` dentro del proceso.

- Un lock por source
- Adquisicion con timeout: quien no obtiene el lease a tiempo falla
- Liberacion garantizada al salir (exito, error o cancelacion)
"""

from __future__ import annotations

import asyncio
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from loguru import logger


DEFAULT_LEASE_TIMEOUT = 5.0


class SyncLeaseTimeoutError(Exception):
    """No se pudo adquirir el lease de sincronizacion dentro del timeout."""

    def __init__(self, source: str, timeout: float):
        self.source = source
        self.timeout = timeout
        super().__init__(
            f"Ya hay una sincronizacion en curso para '{source}' "
            f"(lease no adquirido en {timeout}s)"
        )


class SyncLeaseManager:
    """
    Gestor de leases por `source`.

    Usa `threading.Lock` para que la exclusion tambien cubra corridas
    lanzadas desde otros threads del mismo proceso; la adquisicion se hace
    via `asyncio.to_thread` para no bloquear el event loop.
    """

    _locks: Dict[str, threading.Lock] = {}
    _meta_lock = threading.Lock()

    @classmethod
    def _get_or_create_lock(cls, source: str) -> threading.Lock:
        with cls._meta_lock:
            lock = cls._locks.get(source)
            if lock is None:
                lock = threading.Lock()
                cls._locks[source] = lock
            return lock

    @staticmethod
    async def _acquire_in_thread(source: str, lock: threading.Lock, timeout: float) -> bool:
        """
        Espera el lock en un thread sin bloquear el event loop.

        Si la tarea que espera se cancela, el thread sigue esperando; cuando
        termine, un callback libera el lock si llego a adquirirlo.
        """
        attempt = asyncio.ensure_future(asyncio.to_thread(lock.acquire, timeout=timeout))
        try:
            return await asyncio.shield(attempt)
        except asyncio.CancelledError:
            def release_if_acquired(future: "asyncio.Future[bool]") -> None:
                if future.cancelled() or future.exception() is not None:
                    return
                if future.result():
                    lock.release()
                    logger.debug(f"Lease de sync liberado tras cancelacion: {source}")

            attempt.add_done_callback(release_if_acquired)
            raise

    @classmethod
    @asynccontextmanager
    async def lease(
        cls,
        source: str,
        timeout: float = DEFAULT_LEASE_TIMEOUT,
    ) -> AsyncIterator[None]:
        """
        Context manager async que mantiene el lease mientras dura la corrida.

        Args:
            source: Origen de la corrida (clave del lease)
            timeout: Espera maxima para adquirirlo (segundos); <= 0 solo
                intenta una vez sin esperar

        Raises:
            SyncLeaseTimeoutError: Si otra corrida lo mantiene mas alla del timeout

        Ejemplo:
            async with SyncLeaseManager.lease("official-registry", timeout=5):
                await run()
        """
        lock = cls._get_or_create_lock(source)

        if timeout and timeout > 0:
            acquired = await cls._acquire_in_thread(source, lock, timeout)
        else:
            acquired = lock.acquire(blocking=False)

        if not acquired:
            logger.warning(f"Lease de sync ocupado para '{source}' (timeout: {timeout}s)")
            raise SyncLeaseTimeoutError(source, timeout)

        logger.debug(f"Lease de sync adquirido: {source}")
        try:
            yield
        finally:
            lock.release()
            logger.debug(f"Lease de sync liberado: {source}")

    @classmethod
    def is_held(cls, source: str) -> bool:
        """Indica si hay una corrida en curso para `source`."""
        with cls._meta_lock:
            lock = cls._locks.get(source)
        return lock is not None and lock.locked()


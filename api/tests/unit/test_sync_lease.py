"""
Tests unitarios para SyncLeaseManager.
"""
import asyncio

import pytest

from subregistry.infrastructure.external.registry_sync.sync_lease import (
    SyncLeaseManager,
    SyncLeaseTimeoutError,
)


class TestSyncLeaseTimeoutError:
    """Tests para la excepcion SyncLeaseTimeoutError."""

    def test_error_attributes(self):
        """Verifica que el error contiene source y timeout."""
        error = SyncLeaseTimeoutError("official-registry", 5.0)

        assert error.source == "official-registry"
        assert error.timeout == 5.0
        assert "official-registry" in str(error)
        assert "5.0" in str(error)


class TestSyncLeaseManager:
    """Tests para SyncLeaseManager."""

    @pytest.mark.asyncio
    async def test_lease_acquires_and_releases(self):
        """El lease se mantiene dentro del bloque y se libera al salir."""
        async with SyncLeaseManager.lease("src-a"):
            assert SyncLeaseManager.is_held("src-a")

        assert not SyncLeaseManager.is_held("src-a")

    @pytest.mark.asyncio
    async def test_lease_creates_lock_per_source(self):
        async with SyncLeaseManager.lease("src-a"):
            pass

        assert "src-a" in SyncLeaseManager._locks
        assert "src-b" not in SyncLeaseManager._locks

    @pytest.mark.asyncio
    async def test_second_lease_times_out(self):
        """Una segunda corrida del mismo source falla tras el timeout."""
        async with SyncLeaseManager.lease("src-a"):
            with pytest.raises(SyncLeaseTimeoutError) as exc_info:
                async with SyncLeaseManager.lease("src-a", timeout=0.05):
                    pass

        assert exc_info.value.source == "src-a"

    @pytest.mark.asyncio
    async def test_zero_timeout_fails_immediately(self):
        async with SyncLeaseManager.lease("src-a"):
            with pytest.raises(SyncLeaseTimeoutError):
                async with SyncLeaseManager.lease("src-a", timeout=0):
                    pass

    @pytest.mark.asyncio
    async def test_different_sources_do_not_block(self):
        async with SyncLeaseManager.lease("src-a"):
            async with SyncLeaseManager.lease("src-b", timeout=0.05):
                assert SyncLeaseManager.is_held("src-a")
                assert SyncLeaseManager.is_held("src-b")

    @pytest.mark.asyncio
    async def test_lease_released_on_exception(self):
        with pytest.raises(ValueError):
            async with SyncLeaseManager.lease("src-a"):
                raise ValueError("falla la corrida")

        assert not SyncLeaseManager.is_held("src-a")

    @pytest.mark.asyncio
    async def test_waiting_run_acquires_after_release(self):
        """Un segundo intento espera y obtiene el lease cuando el primero termina."""
        order = []

        async def first():
            async with SyncLeaseManager.lease("src-a"):
                order.append("first-start")
                await asyncio.sleep(0.1)
                order.append("first-end")

        async def second():
            await asyncio.sleep(0.02)
            async with SyncLeaseManager.lease("src-a", timeout=2.0):
                order.append("second")

        await asyncio.gather(first(), second())

        assert order == ["first-start", "first-end", "second"]

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_keep_lease(self):
        """Una espera cancelada no deja el lease tomado cuando el titular lo libera."""
        holder_release = asyncio.Event()

        async def holder():
            async with SyncLeaseManager.lease("src-a"):
                await holder_release.wait()

        holder_task = asyncio.create_task(holder())
        await asyncio.sleep(0.02)

        waiter = asyncio.create_task(SyncLeaseManager.lease("src-a", timeout=2.0).__aenter__())
        await asyncio.sleep(0.05)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        holder_release.set()
        await holder_task

        for _ in range(50):
            if not SyncLeaseManager.is_held("src-a"):
                break
            await asyncio.sleep(0.02)

        assert not SyncLeaseManager.is_held("src-a")
        async with SyncLeaseManager.lease("src-a", timeout=0.3):
            assert SyncLeaseManager.is_held("src-a")

    def test_is_held_for_unknown_source(self):
        assert SyncLeaseManager.is_held("nunca-usado") is False

"""
Configuracion de fixtures para pytest.
"""
from typing import Any, AsyncGenerator, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.core.config import Settings
from subregistry.infrastructure.database.session import Database
from subregistry.infrastructure.external.registry_sync.sync_lease import SyncLeaseManager
from subregistry.shared.constants.registry_constants import OFFICIAL_META_KEY


# URL de base de datos de prueba (una conexion compartida via StaticPool)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """
    Database en memoria con todas las tablas creadas.
    """
    db = Database(TEST_DATABASE_URL)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Sesion de base de datos sobre la Database de prueba."""
    async with database.session() as session:
        yield session


@pytest.fixture(autouse=True)
def cleanup_sync_leases():
    """Limpia los leases de sync antes y despues de cada test."""
    SyncLeaseManager._locks.clear()
    yield
    SyncLeaseManager._locks.clear()


def _make_upstream_record(
    name: str = "io.example/server",
    version: str = "1.0.0",
    *,
    description: str = "Servidor de ejemplo",
    is_latest: bool = True,
    status: str = "active",
    published_at: str = "2025-01-01T00:00:00Z",
    server_extra: Optional[Dict[str, Any]] = None,
    meta_extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Registro crudo con la forma del feed upstream."""
    server: Dict[str, Any] = {
        "name": name,
        "description": description,
        "version": version,
        "repository": {"url": f"https://github.com/{name}", "source": "github"},
        "_meta": {"io.example/publisher": {"build": version}},
    }
    server.update(server_extra or {})
    meta: Dict[str, Any] = {
        OFFICIAL_META_KEY: {
            "status": status,
            "publishedAt": published_at,
            "updatedAt": published_at,
            "isLatest": is_latest,
        }
    }
    meta.update(meta_extra or {})
    return {"server": server, "_meta": meta}


@pytest.fixture
def make_record():
    """Factory de registros crudos del feed upstream."""
    return _make_upstream_record


@pytest.fixture
def sync_service_mock() -> MagicMock:
    """Servicio de sync simulado: run_once es un AsyncMock configurable por test."""
    service = MagicMock()
    service.source = "official-registry"
    service.run_once = AsyncMock()
    return service


@pytest_asyncio.fixture
async def client(database: Database, sync_service_mock: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """
    Cliente HTTP contra la aplicacion, con la Database de prueba y el sync simulado.
    """
    from main import create_application

    config = Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        SYNC_SCHEDULER_ENABLED=False,
        ENVIRONMENT="test",
    )
    application = create_application(config, database=database, sync_service=sync_service_mock)

    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

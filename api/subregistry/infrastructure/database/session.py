"""
Gestion de conexiones y sesiones de base de datos.

No hay engine global: la aplicacion crea un `Database` en el arranque,
lo guarda en `app.state.database` y cada componente lo recibe explicitamente.
"""
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(database_url: str, pool_size: int, max_overflow: int, echo: bool) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones; SQLite en memoria necesita una
    unica conexion compartida para que todas las sesiones vean las tablas.
    """
    args = {"echo": echo}

    if "postgresql" in database_url:
        args.update({
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
        })
    elif ":memory:" in database_url:
        args.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })

    return args


class Database:
    """
    Engine + session factory de la aplicacion.
    """

    def __init__(
        self,
        database_url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
    ) -> None:
        self.url = database_url
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            **_create_engine_args(database_url, pool_size, max_overflow, echo)
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )

    @property
    def dialect_name(self) -> str:
        """Nombre del dialecto SQL ('postgresql', 'sqlite', ...)."""
        return self.engine.dialect.name

    def session(self) -> AsyncSession:
        """Abre una sesion nueva (usar como `async with`)."""
        return self.session_factory()

    async def create_all(self) -> None:
        """Crea todas las tablas registradas en Base (desarrollo y tests)."""
        # Importar modelos para registrarlos en Base.metadata
        from subregistry.infrastructure.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        """Elimina todas las tablas (solo tests)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Cierra las conexiones del pool."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """
    Dependencia FastAPI: Database creada por la aplicacion.
    """
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Generador de sesiones de base de datos por request.
    Hace commit al terminar sin errores y rollback si hubo excepcion.

    Yields:
        AsyncSession: Sesion de base de datos
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

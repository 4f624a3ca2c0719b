"""
Configuracion de Alembic para migraciones de base de datos.

- URL desde settings (asyncpg -> psycopg, aiosqlite -> sqlite para correr sincrono)
- Metadata de los modelos del subregistro para autogenerate
"""
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

from subregistry.core.config import settings
from subregistry.infrastructure.database.session import Base

# Importar todos los modelos para que Alembic los detecte
from subregistry.infrastructure.database.models import (  # noqa: F401
    ServerModel,
    PackageMetadataModel,
    SyncLogModel,
)

# Alembic Config object
config = context.config

# Una URL pasada con -x / alembic.ini tiene prioridad sobre settings
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.migration_database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Ejecuta migraciones en modo 'offline' (genera SQL sin conectarse).
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Conecta a la base de datos y ejecuta las migraciones directamente.
    """
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

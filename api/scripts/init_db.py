"""
Script para inicializar la base de datos (desarrollo).
En produccion usar `python scripts/migrate.py upgrade`.
"""
import asyncio
import os
import sys

from loguru import logger

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from subregistry.core.config import settings
from subregistry.infrastructure.database.session import Database


async def main():
    """Crea las tablas del subregistro si no existen."""
    logger.info(f"Inicializando base de datos: {settings.DATABASE_URL.split('@')[-1]}")
    database = Database(settings.DATABASE_URL)

    try:
        await database.create_all()
        logger.success("Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())

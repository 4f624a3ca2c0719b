"""
Configuracion de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from subregistry.infrastructure.database.session import Base, Database, get_db, get_database
from subregistry.infrastructure.database.models import (
    ServerModel,
    PackageMetadataModel,
    SyncLogModel,
)

__all__ = [
    "Base",
    "Database",
    "get_db",
    "get_database",
    "ServerModel",
    "PackageMetadataModel",
    "SyncLogModel",
]

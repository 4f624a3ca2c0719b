"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from subregistry.application.use_cases.admin_use_cases import AdminUseCases
from subregistry.application.use_cases.registry_use_cases import RegistryUseCases
from subregistry.application.use_cases.sync_use_cases import SyncUseCases
from subregistry.infrastructure.database.session import get_db
from subregistry.infrastructure.external.registry_sync.sync_service import RegistrySyncService


async def get_registry_use_cases(
    db: AsyncSession = Depends(get_db)
) -> RegistryUseCases:
    """
    Dependencia para obtener los casos de uso de lectura del registro.

    Args:
        db: Sesion de base de datos del request

    Returns:
        RegistryUseCases: Instancia de casos de uso de lectura
    """
    return RegistryUseCases(db)


async def get_admin_use_cases(
    db: AsyncSession = Depends(get_db)
) -> AdminUseCases:
    """
    Dependencia para obtener los casos de uso de administracion.

    Args:
        db: Sesion de base de datos del request

    Returns:
        AdminUseCases: Instancia de casos de uso de administracion
    """
    return AdminUseCases(db)


def get_sync_service(request: Request) -> RegistrySyncService:
    """Servicio de sincronizacion creado en el arranque de la aplicacion."""
    return request.app.state.sync_service


def get_sync_use_cases(
    sync_service: RegistrySyncService = Depends(get_sync_service)
) -> SyncUseCases:
    """
    Dependencia para obtener los casos de uso de sincronizacion.

    Returns:
        SyncUseCases: Instancia de casos de uso de sincronizacion
    """
    return SyncUseCases(sync_service)

"""
Casos de uso de la aplicacion.
"""
from .registry_use_cases import RegistryUseCases
from .admin_use_cases import AdminUseCases
from .sync_use_cases import SyncUseCases

__all__ = ["RegistryUseCases", "AdminUseCases", "SyncUseCases"]

"""
Pipeline de sincronizacion one-way: registro MCP oficial -> base local.

Se ejecuta como job programado (APScheduler), desde /internal/sync o por CLI.

Objetivos de diseno:
- Idempotencia: N corridas sobre el mismo feed dejan las mismas filas.
- Incremental: se apoya en `updated_since` y el watermark del sync_log.
- Propiedad de campos: el sync nunca pisa la curacion local.
- Atomicidad: upserts y registro de la corrida se confirman juntos.
"""
from .registry_client import UpstreamApiError, UpstreamRegistryClient
from .validator import RecordValidator
from .reconciler import Reconciler, find_latest_conflicts
from .sync_lease import SyncLeaseManager, SyncLeaseTimeoutError
from .sync_service import RegistrySyncService, SyncRunTimeoutError, build_registry_sync_service
from .types import RecordValidation, ReconcileResult, SyncResult, ValidRecord

__all__ = [
    "UpstreamApiError",
    "UpstreamRegistryClient",
    "RecordValidator",
    "Reconciler",
    "find_latest_conflicts",
    "SyncLeaseManager",
    "SyncLeaseTimeoutError",
    "RegistrySyncService",
    "SyncRunTimeoutError",
    "build_registry_sync_service",
    "RecordValidation",
    "ReconcileResult",
    "SyncResult",
    "ValidRecord",
]

"""
Casos de uso de sincronizacion (trigger manual y job programado).
"""
from loguru import logger

from subregistry.application.dto.registry_dto import SyncTriggerResponseDTO
from subregistry.infrastructure.external.registry_sync.sync_service import RegistrySyncService


class SyncUseCases:
    """
    Dispara corridas del RegistrySyncService y traduce el resultado.
    """

    def __init__(self, sync_service: RegistrySyncService):
        self.sync_service = sync_service

    async def trigger_sync(self, *, full_sync: bool = False, origin: str = "api") -> SyncTriggerResponseDTO:
        """
        Ejecuta una corrida y devuelve el sobre de exito/fallo.

        Args:
            full_sync: Ignorar el watermark y pedir todo el feed
            origin: Quien dispara la corrida (solo para logs)
        """
        sync_type = "completa" if full_sync else "incremental"
        logger.info(f"Iniciando sincronizacion {sync_type} desde {origin}")

        result = await self.sync_service.run_once(full_sync=full_sync)

        if result.success:
            return SyncTriggerResponseDTO(
                success=True,
                message="Sync completed successfully",
                processed=result.processed,
                skipped=result.skipped,
                full_sync=result.full_sync,
            )
        return SyncTriggerResponseDTO(
            success=False,
            message="Sync failed",
            full_sync=result.full_sync,
            error=result.error,
        )

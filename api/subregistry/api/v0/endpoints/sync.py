"""
Trigger manual de sincronizacion con el registro upstream.
"""
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from subregistry.application.dto.registry_dto import SyncTriggerResponseDTO
from subregistry.application.use_cases.sync_use_cases import SyncUseCases
from subregistry.api.v0.dependencies.use_case_deps import get_sync_use_cases


router = APIRouter(prefix="/internal", tags=["Sync"])


@router.api_route(
    "/sync",
    methods=["GET", "POST"],
    response_model=SyncTriggerResponseDTO,
    responses={500: {"model": SyncTriggerResponseDTO}},
    summary="Sincronizar con el registro MCP oficial"
)
async def trigger_sync(
    full_sync: bool = Query(
        default=False,
        description="Si True ignora el watermark y pide todo el feed upstream."
    ),
    use_cases: SyncUseCases = Depends(get_sync_use_cases),
):
    """
    Ejecuta una corrida de sincronizacion y espera su resultado.

    - Incremental por defecto (desde la ultima corrida exitosa)
    - Si ya hay una corrida en curso, falla sin esperar indefinidamente
    - El fallo se devuelve como 500 con el sobre {success, message, error}
    """
    result = await use_cases.trigger_sync(full_sync=full_sync, origin="/internal/sync")
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=result.model_dump(),
        )
    return result

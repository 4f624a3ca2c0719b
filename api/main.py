"""
Punto de entrada principal de la aplicacion FastAPI.
Configura la aplicacion, middlewares, rutas y eventos.
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from subregistry.core.config import Settings, settings, get_cors_origins
from subregistry.core.events import lifespan_handler
from subregistry.api.v0.router import registry_router, admin_router, internal_router
from subregistry.api.middlewares.error_handler import ErrorHandlerMiddleware
from subregistry.infrastructure.database.session import Database
from subregistry.infrastructure.external.registry_sync.sync_service import (
    RegistrySyncService,
    build_registry_sync_service,
)
from subregistry.shared.exceptions.base import AppException


def create_application(
    config: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    sync_service: Optional[RegistrySyncService] = None,
) -> FastAPI:
    """
    Factory para crear y configurar la aplicacion FastAPI.

    Args:
        config: Configuracion (default: settings globales)
        database: Database a usar (default: una nueva desde config.DATABASE_URL)
        sync_service: Servicio de sync (default: construido desde config)

    Returns:
        FastAPI: Instancia configurada de la aplicacion
    """
    config = config or settings
    database = database or Database(
        config.DATABASE_URL,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        echo=config.DEBUG,
    )

    application = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="Subregistro MCP: espejo del registro oficial con curacion local",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan_handler(config),
    )
    application.state.database = database
    application.state.sync_service = sync_service or build_registry_sync_service(database, config)
    application.state.scheduler = None

    # Configurar CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(config.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware personalizado para manejo de errores
    application.add_middleware(ErrorHandlerMiddleware)

    # Incluir routers
    application.include_router(registry_router)
    application.include_router(admin_router)
    application.include_router(internal_router)

    # Manejador global de excepciones personalizadas
    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    # Errores de almacenamiento en lecturas/mutaciones
    @application.exception_handler(SQLAlchemyError)
    async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Error de base de datos en {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "STORAGE_ERROR",
                "message": "Error de acceso a la base de datos",
                "details": {}
            }
        )

    # Health check endpoint
    @application.get("/health", tags=["Health"])
    async def health_check():
        """Endpoint para verificar el estado de la aplicacion."""
        return {
            "status": "healthy",
            "app_name": config.APP_NAME,
            "version": config.APP_VERSION,
            "environment": config.ENVIRONMENT
        }

    return application


# Crear instancia de la aplicacion
app = create_application()


if __name__ == "__main__":
    import uvicorn

    access_host = "localhost" if settings.HOST == "0.0.0.0" else settings.HOST
    base_url = f"http://{access_host}:{settings.PORT}"

    logger.info("=" * 70)
    logger.info("URLS DISPONIBLES:")
    logger.info("=" * 70)
    logger.info(f"  Swagger UI:  {base_url}/docs")
    logger.info(f"  Servidores:  {base_url}/v0/servers")
    logger.info(f"  Sync status: {base_url}/admin/sync/status")
    logger.info(f"  Health:      {base_url}/health")
    logger.info("=" * 70)

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

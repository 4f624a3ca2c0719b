"""
Routers de la aplicacion.

- /v0: API de lectura compatible con el registro MCP
- /admin: curacion local
- /internal: trigger de sincronizacion
"""
from fastapi import APIRouter

from subregistry.api.v0.endpoints import admin, registry, sync


# API publica de lectura
registry_router = APIRouter(prefix="/v0")
registry_router.include_router(registry.router)

# Superficies operativas (montadas en la raiz)
admin_router = admin.router
internal_router = sync.router

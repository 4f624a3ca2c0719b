"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y valores por defecto.

Solo la raiz de composicion (main, events, scripts) lee `settings`;
los componentes reciben sus valores por constructor.
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno (y .env) y proporciona valores por defecto.

    - DATABASE_URL: por defecto SQLite local; en produccion postgresql+asyncpg
    - UPSTREAM_*: origen del feed que se espeja
    - SYNC_*: programacion y limites de la corrida de sincronizacion
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="MCP Subregistry API")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./subregistry.db")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)
    # Crear tablas al arrancar (desarrollo); en produccion se usa Alembic
    DB_CREATE_ALL: bool = Field(default=True)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Registro upstream
    UPSTREAM_BASE_URL: str = Field(default="https://registry.modelcontextprotocol.io/v0")
    UPSTREAM_TIMEOUT_SECONDS: float = Field(default=30.0)
    # Tamano de pagina sugerido al upstream (0 = usar el default del upstream)
    UPSTREAM_PAGE_LIMIT: int = Field(default=100)

    # Sincronizacion
    SYNC_SOURCE: str = Field(default="official-registry")
    SYNC_SCHEDULER_ENABLED: bool = Field(default=True)
    SYNC_CRON_HOUR: int = Field(default=2)
    SYNC_LOCK_TIMEOUT_SECONDS: float = Field(default=5.0)
    SYNC_RUN_TIMEOUT_SECONDS: float = Field(default=900.0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def migration_database_url(self) -> str:
        """
        URL sincrona para Alembic: asyncpg se reemplaza por psycopg
        y aiosqlite por el driver sqlite estandar.
        """
        return (
            self.DATABASE_URL
            .replace("+asyncpg", "+psycopg")
            .replace("+aiosqlite", "")
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes, una lista JSON o valores separados por coma.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        return [origin.strip() for origin in cors_string.split(",") if origin.strip()]


settings = Settings()

"""
Constantes del registro: estados, visibilidad y resultados de sincronizacion.
"""
from enum import Enum


class ServerStatus(str, Enum):
    """Estados posibles de una version de servidor publicados por upstream."""
    ACTIVE = "active"
    DEPRECATED = "deprecated"
    DELETED = "deleted"


class Visibility(str, Enum):
    """Compuerta de publicacion local, independiente del status upstream."""
    DRAFT = "draft"
    PUBLISHED = "published"


class SyncStatus(str, Enum):
    """Resultado de una corrida de sincronizacion."""
    SUCCESS = "success"
    FAILURE = "failure"


class PackageRegistryType(str, Enum):
    """Tipos de registro soportados para paquetes."""
    NPM = "npm"
    PYPI = "pypi"
    OCI = "oci"
    DENO = "deno"
    NUGET = "nuget"
    MCPB = "mcpb"


class TransportType(str, Enum):
    """Transportes de un paquete o remote."""
    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


# Clave del bloque de metadata oficial dentro del `_meta` del wrapper upstream
OFFICIAL_META_KEY = "io.modelcontextprotocol.registry/official"

# Tag de origen por defecto para filas sincronizadas y para el sync_log
DEFAULT_SYNC_SOURCE = "official-registry"

# Limites de paginacion del listado
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Cantidad de corridas que devuelve el estado de sincronizacion
SYNC_STATUS_HISTORY = 10

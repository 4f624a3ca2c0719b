"""
Validacion estructural de los registros del feed upstream.

Los esquemas replican la forma publicada por el registro oficial. Un registro
invalido se descarta (no aborta la corrida); las claves desconocidas se
conservan tal cual para no perder informacion de upstream.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional

from loguru import logger
from pydantic import AnyUrl, AwareDatetime, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from subregistry.shared.constants.registry_constants import (
    OFFICIAL_META_KEY,
    PackageRegistryType,
    ServerStatus,
    TransportType,
)
from subregistry.shared.utils.datetime_utils import DateTimeUtils

from .types import RawRecord, RecordValidation, ValidRecord


SERVER_NAME_PATTERN = r"^[a-zA-Z0-9.-]+/[a-zA-Z0-9._-]+$"


def _require_iso_text(value: Any) -> Any:
    # Upstream publica RFC 3339; numeros (epoch) no son timestamps validos aqui
    if not isinstance(value, str):
        raise ValueError("se esperaba un timestamp ISO 8601 como texto")
    return value


IsoTimestamp = Annotated[AwareDatetime, BeforeValidator(_require_iso_text)]


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RepositorySchema(_UpstreamModel):
    url: str
    source: str
    id: Optional[str] = None
    subfolder: Optional[str] = None


class PackageTransportSchema(_UpstreamModel):
    type: TransportType


class PackageSchema(_UpstreamModel):
    registryType: PackageRegistryType
    registryBaseUrl: Optional[AnyUrl] = None
    identifier: str
    version: str
    runtimeHint: Optional[str] = None
    transport: PackageTransportSchema
    environmentVariables: Optional[list[dict[str, Any]]] = None
    runtimeArguments: Optional[list[dict[str, Any]]] = None
    packageArguments: Optional[list[dict[str, Any]]] = None
    fileSha256: Optional[str] = None


class RemoteSchema(_UpstreamModel):
    type: Literal["sse", "streamable-http"]
    url: AnyUrl
    headers: Optional[list[dict[str, Any]]] = None


class ServerSchema(_UpstreamModel):
    name: str = Field(min_length=3, max_length=200, pattern=SERVER_NAME_PATTERN)
    description: str = Field(min_length=1, max_length=100)
    version: str = Field(max_length=255)
    status: Optional[ServerStatus] = None
    repository: Optional[RepositorySchema] = None
    websiteUrl: Optional[AnyUrl] = None
    packages: Optional[list[PackageSchema]] = None
    remotes: Optional[list[RemoteSchema]] = None
    meta: Optional[dict[str, Any]] = Field(default=None, alias="_meta")


class OfficialMetaSchema(_UpstreamModel):
    status: ServerStatus
    publishedAt: IsoTimestamp
    updatedAt: IsoTimestamp
    isLatest: bool


class RegistryMetaSchema(_UpstreamModel):
    official: OfficialMetaSchema = Field(alias=OFFICIAL_META_KEY)


class ServerResponseSchema(_UpstreamModel):
    server: ServerSchema
    meta: RegistryMetaSchema = Field(alias="_meta")


def _describe_errors(exc: ValidationError, max_errors: int = 5) -> str:
    """Resume los errores de pydantic como 'ruta: mensaje; ...'."""
    parts = []
    for error in exc.errors()[:max_errors]:
        loc = ".".join(str(p) for p in error.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {error.get('msg')}")
    if exc.error_count() > max_errors:
        parts.append(f"(+{exc.error_count() - max_errors} errores)")
    return "; ".join(parts)


def _identity_for_logging(raw: Any) -> tuple[str, str]:
    server = raw.get("server") if isinstance(raw, dict) else None
    if not isinstance(server, dict):
        return "unknown", "unknown"
    return str(server.get("name") or "unknown"), str(server.get("version") or "unknown")


class RecordValidator:
    """
    Valida registros crudos del feed. `validate` nunca lanza excepciones.
    """

    def validate(self, raw: RawRecord) -> RecordValidation:
        """
        Args:
            raw: Elemento de `servers[]` tal como vino en la pagina

        Returns:
            RecordValidation: ok + ValidRecord, o el motivo del rechazo
        """
        name, version = _identity_for_logging(raw)
        if not isinstance(raw, dict):
            reason = f"se esperaba un objeto, llego {type(raw).__name__}"
            logger.warning(f"Registro upstream invalido {name}@{version}: {reason}")
            return RecordValidation.invalid(reason, name=name, version=version)

        try:
            parsed = ServerResponseSchema.model_validate(raw)
        except ValidationError as exc:
            reason = _describe_errors(exc)
            logger.warning(f"Registro upstream invalido {name}@{version}: {reason}")
            return RecordValidation.invalid(reason, name=name, version=version)

        official = parsed.meta.official
        record = ValidRecord(
            name=parsed.server.name,
            version=parsed.server.version,
            server=dict(raw["server"]),
            registry_meta=dict(raw["_meta"]),
            status=parsed.server.status.value if parsed.server.status else official.status.value,
            published_at=DateTimeUtils.ensure_utc(official.publishedAt),
            updated_at=DateTimeUtils.ensure_utc(official.updatedAt),
            is_latest=official.isLatest,
        )
        return RecordValidation.valid(record)

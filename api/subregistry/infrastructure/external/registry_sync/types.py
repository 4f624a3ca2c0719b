"""
Tipos puros del pipeline registro upstream -> base local.

Sin I/O, para poder testearlos facilmente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# Registro tal como llega del feed, antes de validar
RawRecord = dict[str, Any]


@dataclass(frozen=True)
class ValidRecord:
    """
    Registro upstream que paso la validacion estructural.

    - server: objeto `server` del wrapper (claves extra conservadas)
    - registry_meta: `_meta` del wrapper completo
    - official: bloque oficial ya parseado (status, fechas, isLatest)
    """

    name: str
    version: str
    server: dict[str, Any]
    registry_meta: dict[str, Any]
    status: Optional[str]
    published_at: Optional[datetime]
    updated_at: Optional[datetime]
    is_latest: bool


@dataclass(frozen=True)
class RecordValidation:
    """Resultado de validar un registro: ok con el registro o el motivo del rechazo."""

    ok: bool
    record: Optional[ValidRecord] = None
    reason: Optional[str] = None
    name: str = "unknown"
    version: str = "unknown"

    @classmethod
    def valid(cls, record: ValidRecord) -> "RecordValidation":
        return cls(ok=True, record=record, name=record.name, version=record.version)

    @classmethod
    def invalid(cls, reason: str, *, name: str = "unknown", version: str = "unknown") -> "RecordValidation":
        return cls(ok=False, reason=reason, name=name, version=version)


@dataclass(frozen=True)
class ReconcileResult:
    """Resultado de aplicar un lote de upserts."""

    processed: int
    latest_conflicts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SyncResult:
    """
    Resultado estructurado de una corrida. El orquestador nunca lanza
    excepciones hacia quien lo invoca: los fallos llegan aqui.
    """

    success: bool
    processed: int
    skipped: int = 0
    error: Optional[str] = None
    watermark: Optional[datetime] = None
    started_at: Optional[datetime] = None
    full_sync: bool = False
    latest_conflicts: list[str] = field(default_factory=list)

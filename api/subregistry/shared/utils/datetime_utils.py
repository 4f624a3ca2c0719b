"""
Utilidades para manejo de fechas y horas en UTC.
"""
from datetime import datetime, timezone
from typing import Any, Optional


class DateTimeUtils:
    """Operaciones de fecha usadas por el sync y por la serializacion."""

    @staticmethod
    def now_utc() -> datetime:
        """Fecha y hora actual en UTC (aware)."""
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """
        Normaliza un datetime a UTC aware.

        SQLite devuelve datetimes naive aunque la columna sea timezone=True,
        por eso los naive se interpretan como UTC.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_rfc3339(dt: datetime) -> str:
        """
        Serializa a RFC3339 con sufijo 'Z', el formato que acepta
        el parametro updated_since del registro upstream.

        Args:
            dt: Fecha a serializar

        Returns:
            str: Fecha en formato 2025-01-01T00:00:00.123456Z
        """
        return DateTimeUtils.ensure_utc(dt).isoformat().replace("+00:00", "Z")

    @staticmethod
    def from_iso_string(value: Any) -> Optional[datetime]:
        """
        Convierte un string ISO 8601 (acepta sufijo 'Z') a datetime UTC.

        Returns:
            Optional[datetime]: datetime aware o None si no se puede parsear
        """
        if isinstance(value, datetime):
            return DateTimeUtils.ensure_utc(value)
        if not isinstance(value, str) or not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return DateTimeUtils.ensure_utc(parsed)

"""
Cliente HTTP del registro upstream (feed paginado por cursor).

- httpx.AsyncClient con timeout acotado por request
- paginacion por `cursor` (formato name:version) hasta nextCursor nulo
- filtro incremental `updated_since` (RFC3339) cuando hay watermark
- sin reintentos automaticos: cualquier error aborta el fetch de la corrida
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, AsyncIterator, Optional

import httpx
from loguru import logger

from subregistry.shared.utils.datetime_utils import DateTimeUtils

from .types import RawRecord


class UpstreamApiError(RuntimeError):
    """Error de integracion con el registro upstream."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class UpstreamRegistryClient:
    """
    Cliente del endpoint GET {base_url}/servers.

    Expone un async generator que produce cada registro crudo en orden de pagina.
    Una nueva llamada a `fetch_since` vuelve a empezar desde la primera pagina.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_s: float = 30.0,
        page_limit: int = 0,
        user_agent: str = "MCP-Subregistry-API",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._page_limit = page_limit
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }
        self._client = client

    @property
    def servers_url(self) -> str:
        return f"{self._base_url}/servers"

    def _build_params(self, watermark: Optional[datetime], cursor: Optional[str]) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if watermark is not None:
            params["updated_since"] = DateTimeUtils.to_rfc3339(watermark)
        if cursor:
            params["cursor"] = cursor
        if self._page_limit and self._page_limit > 0:
            params["limit"] = self._page_limit
        return params

    async def fetch_since(self, watermark: Optional[datetime] = None) -> AsyncIterator[RawRecord]:
        """
        Itera todos los registros modificados desde `watermark`.

        Args:
            watermark: Instante de la ultima corrida exitosa; None = fetch completo

        Yields:
            RawRecord: cada elemento de `servers[]`, sin validar

        Raises:
            UpstreamApiError: respuesta no-2xx, error de transporte/timeout
                o cuerpo que no es un listado valido
        """
        if watermark is not None:
            logger.info(f"Fetch incremental desde {DateTimeUtils.to_rfc3339(watermark)}")
        else:
            logger.info("Fetch completo: no hay sincronizacion previa exitosa")

        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(timeout=self._timeout_s)
        cursor: Optional[str] = None
        pages = 0
        total = 0

        try:
            while True:
                payload = await self._get_page(client, self._build_params(watermark, cursor))
                servers, next_cursor = self._parse_page(payload)
                pages += 1
                total += len(servers)

                for raw in servers:
                    yield raw

                if not next_cursor:
                    break
                if next_cursor == cursor:
                    raise UpstreamApiError(
                        f"El upstream repitio el cursor '{cursor}'; se aborta para no iterar sin fin",
                        url=self.servers_url,
                    )
                cursor = next_cursor
        finally:
            if owns_client:
                await client.aclose()

        logger.info(f"Fetch upstream terminado: {total} registros en {pages} pagina(s)")

    async def _get_page(self, client: httpx.AsyncClient, params: dict[str, Any]) -> Any:
        url = self.servers_url
        try:
            response = await client.get(
                url,
                params=params,
                headers=self._headers,
                timeout=self._timeout_s,
            )
        except httpx.TimeoutException as e:
            raise UpstreamApiError(
                f"Timeout ({self._timeout_s}s) consultando el registro upstream: {e}", url=url
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamApiError(f"Error de transporte con el registro upstream: {e}", url=url) from e

        if not response.is_success:
            raise UpstreamApiError(
                f"Failed to fetch from official registry: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamApiError(f"Respuesta upstream no es JSON valido: {e}", url=url) from e

    @staticmethod
    def _parse_page(payload: Any) -> tuple[list[Any], Optional[str]]:
        """
        Extrae (servers, nextCursor) del sobre del listado.

        El sobre es estructural: si no trae una lista `servers` la pagina
        entera es invalida (a diferencia de un registro individual).
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("servers"), list):
            raise UpstreamApiError("Respuesta upstream sin lista 'servers'")

        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise UpstreamApiError("Respuesta upstream con 'metadata' invalida")

        next_cursor = metadata.get("nextCursor")
        if next_cursor is not None and not isinstance(next_cursor, str):
            raise UpstreamApiError("Respuesta upstream con 'nextCursor' invalido")

        return payload["servers"], next_cursor or None

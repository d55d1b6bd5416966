"""REST persistence gateway using httpx.

Implements the console's `PersistenceGateway` against the admin API:

    POST   /{collection}        -> {"<singular>": {...}}
    PATCH  /{collection}/{id}   -> {"<singular>": {...}}
    DELETE /{collection}/{id}   -> truthy body when deleted
    GET    /{collection}        -> {"<collection>": [...]}

Failed responses carry ``{"error": {"message": str | [str]}}``. Every
failure is raised as `PersistenceError`. Reads retry transport errors with
exponential backoff; writes are sent once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import settings
from console.errors import PersistenceError
from domain.models import EntityType

__all__ = ["ApiClient"]

log = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, str):
        return err or f"HTTP {resp.status_code}"
    message = err.get("message") if isinstance(err, dict) else None
    if isinstance(message, list):
        return "; ".join(str(m) for m in message)
    return str(message) if message else f"HTTP {resp.status_code}"


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        client: Optional[httpx.AsyncClient] = None,
        retries: int | None = None,
        backoff: float | None = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self.retries = retries if retries is not None else settings.DEFAULT_RETRIES
        self.backoff = backoff if backoff is not None else settings.DEFAULT_BACKOFF_FACTOR
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.DEFAULT_TIMEOUT)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        entity_type: EntityType,
        operation: str,
        method: str,
        path: str,
        *,
        json: Any = None,
        retry: bool = False,
    ) -> Any:
        url = f"{self.base_url}/{path}"
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = await self._client.request(method, url, json=json, headers=self._headers())
            except httpx.TransportError as exc:
                if retry and attempt <= self.retries:
                    delay = self.backoff * (2 ** (attempt - 1))
                    log.warning(
                        "%s %s attempt %d failed: %s; retrying in %.1fs",
                        method, url, attempt, exc, delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                log.error("%s %s failed: %s", method, url, exc)
                raise PersistenceError(entity_type.value, operation, str(exc)) from exc
            if resp.is_error:
                message = _error_message(resp)
                log.error("%s %s -> %d: %s", method, url, resp.status_code, message)
                raise PersistenceError(entity_type.value, operation, message)
            try:
                return resp.json()
            except ValueError as exc:
                raise PersistenceError(entity_type.value, operation, "response is not JSON") from exc

    @staticmethod
    def _unwrap(entity_type: EntityType, operation: str, body: Any, key: str) -> Any:
        if not isinstance(body, dict) or body.get(key) is None:
            raise PersistenceError(entity_type.value, operation, f"response missing '{key}'")
        return body[key]

    async def create(self, entity_type: EntityType, attributes: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._request(
            entity_type, "create", "POST", entity_type.collection, json=attributes
        )
        return self._unwrap(entity_type, "create", body, entity_type.value)

    async def update(
        self, entity_type: EntityType, entity_id: Any, attributes: Dict[str, Any]
    ) -> Dict[str, Any]:
        body = await self._request(
            entity_type, "update", "PATCH", f"{entity_type.collection}/{entity_id}", json=attributes
        )
        return self._unwrap(entity_type, "update", body, entity_type.value)

    async def delete(self, entity_type: EntityType, entity_id: Any) -> bool:
        body = await self._request(
            entity_type, "delete", "DELETE", f"{entity_type.collection}/{entity_id}"
        )
        return bool(body)

    async def list(self, entity_type: EntityType) -> List[Dict[str, Any]]:
        body = await self._request(
            entity_type, "list", "GET", entity_type.collection, retry=True
        )
        records = self._unwrap(entity_type, "list", body, entity_type.collection)
        if not isinstance(records, list):
            raise PersistenceError(entity_type.value, "list", "expected a list of records")
        return records

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config import AppConfig
from ..recommendations.models import InventoryItem, UserProfile

logger = logging.getLogger(__name__)

_USER_PROFILE = TypeAdapter(UserProfile)
_INVENTORY_ITEM = TypeAdapter(InventoryItem)
_INVENTORY_LIST = TypeAdapter(list[InventoryItem])


class UpstreamError(Exception):
    """Base exception for brewery API failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    @property
    def has_response(self) -> bool:
        return self.status_code is not None


class UpstreamUnavailable(UpstreamError):
    """The brewery API could not be reached; there is no HTTP response."""


class UpstreamRejected(UpstreamError):
    """The brewery API answered with a non-2xx status."""


class UpstreamNotFound(UpstreamRejected):
    """Unknown user or inventory id (404)."""


class UpstreamClient(Protocol):
    async def fetch_user_profile(
        self, user_id: int | str, authorization: str | None = None
    ) -> UserProfile: ...

    async def fetch_inventory(self, authorization: str | None = None) -> list[InventoryItem]: ...

    async def fetch_inventory_item(
        self, item_id: int, authorization: str | None = None
    ) -> InventoryItem: ...


def _lower_first(key: str) -> str:
    return key[:1].lower() + key[1:]


def camelize_keys(payload: Any) -> Any:
    """Rewrite PascalCase object keys (``TasteProfile``) as lowerCamelCase."""
    if isinstance(payload, dict):
        return {
            (_lower_first(k) if isinstance(k, str) else k): camelize_keys(v)
            for k, v in payload.items()
        }
    if isinstance(payload, list):
        return [camelize_keys(v) for v in payload]
    return payload


class BreweryClient:
    """
    Async client for the brewery API.

    One ``httpx.AsyncClient`` is shared by every request the app serves. It is
    opened on first use and ``aclose()`` releases it; a later call opens a new
    one, so the same client survives repeated app startups. Failures are
    raised as ``UpstreamError`` subclasses and are never retried.
    """

    INVENTORY_PATH = "/api/inventory"

    def __init__(self, config: AppConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.brewery_api_url,
                timeout=self.config.upstream_timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_headers(self, authorization: str | None) -> dict[str, str]:
        if authorization and self.config.forward_authorization:
            return {"Authorization": authorization}
        return {}

    def _handle_response(self, response: httpx.Response) -> Any:
        if 200 <= response.status_code < 300:
            payload = response.json() if response.content else None
            if self.config.field_casing == "pascal":
                payload = camelize_keys(payload)
            return payload

        try:
            error_body = response.json() if response.content else {}
        except ValueError:
            error_body = {"raw": response.text}
        if self.config.field_casing == "pascal":
            error_body = camelize_keys(error_body)

        message = f"Request failed with status code {response.status_code}"
        if response.status_code == 404:
            raise UpstreamNotFound(message, status_code=404, response_body=error_body)
        raise UpstreamRejected(
            message, status_code=response.status_code, response_body=error_body
        )

    async def _get(self, path: str, authorization: str | None) -> Any:
        try:
            response = await self._get_client().get(path, headers=self._get_headers(authorization))
        except httpx.RequestError as e:
            raise UpstreamUnavailable(str(e) or type(e).__name__) from e
        logger.debug("GET %s -> %s", path, response.status_code)
        try:
            return self._handle_response(response)
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        except ValueError as e:
            raise UpstreamRejected(
                "Invalid response from brewery API",
                status_code=502,
                response_body={"raw": response.text},
            ) from e

    @staticmethod
    def _validate(adapter: TypeAdapter, payload: Any) -> Any:
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            raise UpstreamRejected(
                "Invalid response from brewery API",
                status_code=502,
                response_body={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    async def fetch_user_profile(
        self, user_id: int | str, authorization: str | None = None
    ) -> UserProfile:
        path = self.config.user_profile_path.format(user_id=user_id)
        payload = await self._get(path, authorization)
        return self._validate(_USER_PROFILE, payload)

    async def fetch_inventory(self, authorization: str | None = None) -> list[InventoryItem]:
        payload = await self._get(self.INVENTORY_PATH, authorization)
        return self._validate(_INVENTORY_LIST, payload)

    async def fetch_inventory_item(
        self, item_id: int, authorization: str | None = None
    ) -> InventoryItem:
        payload = await self._get(f"{self.INVENTORY_PATH}/{item_id}", authorization)
        return self._validate(_INVENTORY_ITEM, payload)

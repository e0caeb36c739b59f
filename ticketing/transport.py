from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from pydantic_core import to_jsonable_python

from .classifier import classify_response
from .config import ClientConfig
from .exceptions import TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Authenticated JSON requests against the TickeTing API.

    Non-2xx responses are classified and raised; nothing is retried.
    """

    def __init__(
        self,
        config: ClientConfig,
        api_key: str,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._api_key = api_key
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Transport:
        self._open()
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    def _open(self) -> httpx.AsyncClient:
        if self._client is None:
            limits = httpx.Limits(
                max_connections=self.config.max_connections,
                max_keepalive_connections=self.config.max_keepalive_connections,
            )
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                limits=limits,
                headers={
                    self.config.api_key_header: self._api_key,
                    "Accept": "application/json",
                },
                transport=self._http_transport,
            )
            logger.debug(f"Opened HTTP client for {self.config.base_url}")
        return self._client

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def __del__(self) -> None:
        client = getattr(self, "_client", None)
        if client is not None and not client.is_closed:
            logger.warning(
                f"HTTP client for {self.config.base_url} was never closed; "
                f"use 'async with' or call aclose()"
            )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    async def request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        *,
        field_order: Sequence[str] = (),
        resource_name: str = "resource",
    ) -> Any:
        """Send one request and return the decoded JSON body.

        ``field_order`` and ``resource_name`` only shape error messages.
        """
        client = self._open()
        json_data = to_jsonable_python(body) if body is not None else None

        logger.debug(f"{method} {path} params={params} body={json_data}")
        try:
            response = await client.request(
                method=method,
                url=path,
                params=params,
                json=json_data,
            )
        except httpx.RequestError as e:
            logger.error(f"Network error during {method} {path}: {e}")
            raise TransportError(f"Request to {path} failed: {e}") from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise TransportError(
                    f"Response from {path} is not valid JSON",
                    status_code=response.status_code,
                ) from e

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = response.text

        error = classify_response(
            response.status_code,
            payload,
            field_order=field_order,
            resource_name=resource_name,
        )
        logger.warning(
            f"{method} {path} failed with {response.status_code}: "
            f"{type(error).__name__}: {error.message}"
        )
        raise error

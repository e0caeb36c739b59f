from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Generic, Mapping, TypeVar

from .exceptions import TransportError, UnsupportedOperationError
from .pagination import PaginatedSequence
from .schemas import is_blank

if TYPE_CHECKING:
    from .models import ResourceModel
    from .transport import Transport

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound="ResourceModel")


class Operations(enum.Flag):
    """Operations a resource endpoint accepts."""

    CREATE = enum.auto()
    FIND = enum.auto()
    LIST = enum.auto()
    UPDATE = enum.auto()
    DELETE = enum.auto()
    ALL = CREATE | FIND | LIST | UPDATE | DELETE


def unwrap(payload: Any) -> Any:
    """Strip the ``{"data": ...}`` envelope the API wraps records in."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class Collection(Generic[ModelT]):
    """Endpoint-bound operations over one resource type.

    Holds no resource state; every call goes to the server.
    """

    def __init__(
        self,
        model_cls: type[ModelT],
        transport: Transport,
        default_page_size: int | None = None,
    ):
        self.model_cls = model_cls
        self.transport = transport
        self.default_page_size = default_page_size

    def __repr__(self) -> str:
        return f"<Collection {self.model_cls.endpoint!r}>"

    @property
    def endpoint(self) -> str:
        return self.model_cls.endpoint

    @property
    def resource_name(self) -> str:
        return self.model_cls.resource_name

    def _require(self, operation: Operations) -> None:
        if operation not in self.model_cls.operations:
            raise UnsupportedOperationError(
                f"The {operation.name.lower()} operation is not supported for "
                f"{self.resource_name} resources."
            )

    def _path(self, resource_id: Any = None) -> str:
        if resource_id is None:
            return self.endpoint
        return f"{self.endpoint}/{resource_id}"

    async def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        payload = await self.transport.request(
            method,
            path,
            body=body,
            params=params,
            field_order=self.model_cls.schema.field_order(),
            resource_name=self.resource_name,
        )
        return unwrap(payload)

    def _expect_record(self, data: Any, method: str) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise TransportError(
                f"Expected a {self.resource_name} record from {method} "
                f"{self.endpoint}, got {type(data).__name__}"
            )
        return data

    def _instantiate(self, record: Mapping[str, Any]) -> ModelT:
        return self.model_cls(self, record)

    async def _create_record(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        self._require(Operations.CREATE)
        self.model_cls.schema.check(fields)
        payload = {name: value for name, value in fields.items() if not is_blank(value)}
        data = await self._request("POST", self._path(), body=payload)
        return self._expect_record(data, "POST")

    async def _fetch_record(self, resource_id: Any) -> dict[str, Any]:
        data = await self._request("GET", self._path(resource_id))
        return self._expect_record(data, "GET")

    async def _update_record(
        self, resource_id: Any, fields: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        data = await self._request("PATCH", self._path(resource_id), body=dict(fields))
        return data if isinstance(data, dict) else None

    async def _delete_record(self, resource_id: Any) -> None:
        await self._request("DELETE", self._path(resource_id))

    async def _fetch_page(self, params: dict[str, Any]) -> Any:
        return await self.transport.request(
            "GET",
            self._path(),
            params=params,
            field_order=self.model_cls.schema.field_order(),
            resource_name=self.resource_name,
        )

    def build(self, **fields: Any) -> ModelT:
        """Return an unsaved model; ``save()`` creates it on the server."""
        model = self.model_cls(self)
        for name, value in fields.items():
            setattr(model, name, value)
        return model

    async def create(
        self, fields: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> ModelT:
        record = await self._create_record({**(fields or {}), **kwargs})
        model = self._instantiate(record)
        logger.info(f"Created {self.resource_name} {model.id!r}")
        return model

    async def find(self, resource_id: Any) -> ModelT:
        self._require(Operations.FIND)
        return self._instantiate(await self._fetch_record(resource_id))

    def list(self, page_size: int | None = None) -> PaginatedSequence[ModelT]:
        self._require(Operations.LIST)
        return PaginatedSequence(self, page_size=page_size or self.default_page_size)

    async def update(self, resource_id: Any, fields: Mapping[str, Any]) -> ModelT:
        """Update a resource by id without fetching it first."""
        self._require(Operations.UPDATE)
        self.model_cls.schema.check(fields, only=fields.keys())
        payload = {name: (None if is_blank(value) else value) for name, value in fields.items()}
        record = await self._update_record(resource_id, payload)
        if record is None:
            return await self.find(resource_id)
        return self._instantiate({"id": resource_id, **record})

    async def delete(self, resource_id: Any) -> bool:
        self._require(Operations.DELETE)
        await self._delete_record(resource_id)
        logger.info(f"Deleted {self.resource_name} {resource_id!r}")
        return True

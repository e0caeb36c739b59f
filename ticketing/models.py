from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, ClassVar, Mapping

from .collection import Operations
from .exceptions import BadDataError, InvalidStateError, ResourceNotFoundError
from .schemas import Account, Event, Region, ResourceSchema, Venue, is_blank

if TYPE_CHECKING:
    from .collection import Collection

logger = logging.getLogger(__name__)


class ResourceModel:
    """One remote resource: current field values plus a last-persisted snapshot.

    Assigning a declared field only changes the local store. ``save()``
    sends the difference against the snapshot; ``delete()`` removes the
    resource, after which the model can no longer be saved or deleted.
    """

    endpoint: ClassVar[str] = ""
    resource_name: ClassVar[str] = "resource"
    schema: ClassVar[type[ResourceSchema]] = ResourceSchema
    read_only: ClassVar[tuple[str, ...]] = ("id",)
    filterable: ClassVar[tuple[str, ...]] = ()
    sortable: ClassVar[tuple[str, ...]] = ("id",)
    operations: ClassVar[Operations] = Operations.ALL

    def __init__(self, collection: Collection, data: Mapping[str, Any] | None = None):
        self._collection = collection
        self._id: Any = None
        self._fields: dict[str, Any] = {}
        self._snapshot: dict[str, Any] = {}
        self._deleted = False
        self._load(data or {})

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        fields = self.__dict__.get("_fields", {})
        if name in fields:
            return fields[name]
        if name in type(self).schema.model_fields:
            return None
        raise AttributeError(f"{type(self).__name__} has no field {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        if name == "id":
            raise AttributeError("id is assigned by the server and cannot be changed")
        if name in self.read_only:
            raise AttributeError(f"{name} is read-only")
        if name not in self.schema.model_fields:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        self._fields[name] = value

    def __repr__(self) -> str:
        label = self._fields.get("name", "")
        return f"<{type(self).__name__} id={self._id!r} name={label!r}>"

    @property
    def id(self) -> Any:
        return self._id

    @property
    def is_persisted(self) -> bool:
        return self._id is not None

    @property
    def is_deleted(self) -> bool:
        return self._deleted

    @property
    def is_dirty(self) -> bool:
        return bool(self.changes())

    def to_dict(self) -> dict[str, Any]:
        data = copy.deepcopy(self._fields)
        if self._id is not None:
            data["id"] = self._id
        return data

    def changes(self) -> dict[str, Any]:
        """Writable fields that differ from the snapshot (all of them if unsaved)."""
        writable = [name for name in self.schema.field_order() if name in self._fields]
        if not self.is_persisted:
            return {name: self._fields[name] for name in writable}
        return {
            name: self._fields[name]
            for name in writable
            if name not in self._snapshot or self._snapshot[name] != self._fields[name]
        }

    def _load(self, record: Mapping[str, Any], replace: bool = False) -> None:
        record = dict(record)
        record_id = record.pop("id", None)
        if self._id is None:
            self._id = record_id
        elif record_id is not None and record_id != self._id:
            logger.warning(
                f"Ignoring id {record_id!r} in response for {self.resource_name} {self._id!r}"
            )
        if replace:
            self._fields = record
        else:
            self._fields.update(record)
        self._snapshot = copy.deepcopy(self._fields)

    def _revert(self, names: list[str]) -> None:
        """Restore rejected fields to their last-persisted values."""
        for name in names:
            if name in self._snapshot:
                self._fields[name] = copy.deepcopy(self._snapshot[name])
            else:
                self._fields.pop(name, None)

    def _require_live(self, action: str) -> None:
        if self._deleted:
            raise InvalidStateError(
                f"This {self.resource_name} has been deleted and can no longer be {action}."
            )

    def _require_persisted(self, action: str) -> None:
        if not self.is_persisted:
            raise InvalidStateError(
                f"This {self.resource_name} has not been saved and cannot be {action}."
            )

    async def save(self) -> bool:
        self._require_live("modified")

        if not self.is_persisted:
            record = await self._collection._create_record(self.changes())
            self._load(record)
            logger.info(f"Created {self.resource_name} {self._id!r}")
            return True

        self._collection._require(Operations.UPDATE)
        changes = self.changes()
        if not changes:
            logger.debug(f"No changes to save for {self.resource_name} {self._id!r}")
            return True

        payload = {name: (None if is_blank(value) else value) for name, value in changes.items()}
        try:
            self.schema.check(self._fields, only=changes)
            record = await self._collection._update_record(self._id, payload)
        except BadDataError as e:
            self._revert(e.fields)
            raise
        self._load(record or {})
        logger.info(f"Saved {self.resource_name} {self._id!r}: {', '.join(changes)}")
        return True

    async def delete(self) -> bool:
        self._require_live("deleted")
        self._require_persisted("deleted")
        self._collection._require(Operations.DELETE)

        try:
            await self._collection._delete_record(self._id)
        except ResourceNotFoundError:
            self._deleted = True
            raise

        self._deleted = True
        logger.info(f"Deleted {self.resource_name} {self._id!r}")
        return True

    async def refresh(self) -> None:
        """Reload every field from the server, discarding unsaved changes."""
        self._require_live("refreshed")
        self._require_persisted("refreshed")
        try:
            record = await self._collection._fetch_record(self._id)
        except ResourceNotFoundError:
            self._deleted = True
            raise
        self._load(record, replace=True)


class RegionModel(ResourceModel):
    endpoint = "regions"
    resource_name = "region"
    schema = Region
    filterable = ("name", "country")
    sortable = ("id", "name", "country")


class VenueModel(ResourceModel):
    endpoint = "venues"
    resource_name = "venue"
    schema = Venue
    read_only = ("id", "map")
    filterable = ("region", "name")
    sortable = ("id", "name", "region")


class EventModel(ResourceModel):
    endpoint = "events"
    resource_name = "event"
    schema = Event
    read_only = ("id", "status", "created_at")
    filterable = ("venue", "status", "public")
    sortable = ("id", "name", "start_time", "end_time")


class AccountModel(ResourceModel):
    endpoint = "accounts"
    resource_name = "account"
    schema = Account
    read_only = ("id", "created_at")
    filterable = ("email",)
    sortable = ("id", "last_name", "email")
    operations = Operations.FIND | Operations.LIST | Operations.UPDATE

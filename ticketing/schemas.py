"""Field contracts for TickeTing resources.

Declaration order is significant: validation messages list offending
fields in the order they are declared here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from .classifier import classify_validation_error


class ResourceSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @classmethod
    def field_order(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields)

    @classmethod
    def check(cls, data: Mapping[str, Any], only: Iterable[str] | None = None) -> None:
        """Validate ``data`` locally, raising ``BadDataError`` on failure.

        Blank values count as not supplied. With ``only``, problems with
        other fields are ignored.
        """
        supplied = {name: value for name, value in data.items() if not is_blank(value)}
        try:
            cls.model_validate(supplied)
        except ValidationError as e:
            error = classify_validation_error(e, cls.field_order(), only=only)
            if error is not None:
                raise error from None


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Region(ResourceSchema):
    name: str
    country: str


class Venue(ResourceSchema):
    name: str
    region: str
    address: str
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)

    @field_validator("region", mode="before")
    @classmethod
    def coerce_region_id(cls, v: object) -> object:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class Event(ResourceSchema):
    name: str
    venue: str
    start_time: datetime
    end_time: datetime | None = None
    description: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    public: bool = True

    @field_validator("venue", mode="before")
    @classmethod
    def coerce_venue_id(cls, v: object) -> object:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("end_time")
    @classmethod
    def check_schedule(
        cls, v: datetime | None, info: ValidationInfo
    ) -> datetime | None:
        start = info.data.get("start_time")
        if v is None or start is None:
            return v
        if (v.tzinfo is None) != (start.tzinfo is None):
            raise ValueError("start_time and end_time must agree on timezone awareness")
        if v < start:
            raise ValueError("end_time must not precede start_time")
        return v


class AccountPreferences(ResourceSchema):
    currency: str = "USD"
    timezone: str = "UTC"
    notifications: bool = True


class Account(ResourceSchema):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    preferences: AccountPreferences | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("not a valid email address")
        return v

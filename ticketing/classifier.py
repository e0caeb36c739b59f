"""Translate failed API responses and local validation failures into typed errors.

Server errors are classified by the payload's reason code when it names a
known error kind, and by HTTP status otherwise. Field lists are always
reported in the resource's declaration order so that messages are stable
regardless of the order the caller supplied arguments in.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from pydantic import ValidationError

from .exceptions import (
    ERROR_KINDS,
    ApiError,
    BadDataError,
    InvalidStateError,
    PageAccessError,
    PermissionError,
    ResourceExistsError,
    ResourceIndelibleError,
    ResourceNotFoundError,
    TicketingError,
    TransportError,
    UnauthorisedError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "There is presently no resource with the given URI."

STATUS_KINDS: dict[int, type[ApiError]] = {
    400: BadDataError,
    401: UnauthorisedError,
    403: PermissionError,
    404: ResourceNotFoundError,
    405: UnsupportedOperationError,
    409: ResourceExistsError,
    416: PageAccessError,
    422: BadDataError,
}

# Reasons that refine a status without being an error-kind code themselves.
CANNOT_MODIFY_REASONS = {"cannot_modify", "cannot modify", "locked"}
DELETION_BLOCKED_REASONS = {"deletion_blocked", "in_use", "referenced"}


def order_fields(fields: Iterable[str], field_order: Sequence[str] = ()) -> list[str]:
    """Sort field names by declaration order; unknown names keep their order at the end."""
    position = {name: index for index, name in enumerate(field_order)}
    unique = list(dict.fromkeys(fields))
    return sorted(unique, key=lambda name: position.get(name, len(position)))


def required_message(fields: Sequence[str]) -> str:
    return (
        "The following arguments are required, but have not been supplied: "
        f"{', '.join(fields)}."
    )


def conflict_message(resource_name: str, fields: Sequence[str]) -> str:
    return (
        f"The following arguments conflict with those of another {resource_name}: "
        f"{', '.join(fields)}."
    )


def invalid_message(fields: Sequence[str]) -> str:
    return f"The following arguments are invalid: {', '.join(fields)}."


def unrecognised_message(fields: Sequence[str]) -> str:
    return f"The following arguments are not recognised: {', '.join(fields)}."


def _default_message(
    kind: type[ApiError],
    status_code: int,
    fields: list[str],
    resource_name: str,
) -> str:
    if kind is BadDataError and fields:
        return required_message(fields)
    if kind is ResourceExistsError and fields:
        return conflict_message(resource_name, fields)
    if kind is ResourceNotFoundError:
        return NOT_FOUND_MESSAGE
    if kind is ResourceIndelibleError:
        return f"This {resource_name} is in use and cannot be deleted."
    if kind is InvalidStateError:
        return f"This {resource_name} cannot be modified in its current state."
    if kind is PageAccessError:
        return "The requested page does not exist."
    if kind is UnauthorisedError:
        return "The API key supplied is missing or invalid."
    if kind is PermissionError:
        return "The API key supplied does not permit this action."
    if kind is UnsupportedOperationError:
        return "This operation is not supported by the resource."
    return f"Request failed with status {status_code}."


def _extract_error(payload: Any) -> tuple[str, str, list[str]]:
    """Pull (reason, message, fields) out of an error body."""
    if not isinstance(payload, dict):
        return "", "", []

    body = payload.get("error", payload)
    if isinstance(body, str):
        return "", body, []
    if not isinstance(body, dict):
        return "", "", []

    reason = str(body.get("code") or body.get("reason") or "").strip().lower()
    message = str(body.get("message") or "").strip()
    raw_fields = body.get("fields") or []
    if isinstance(raw_fields, dict):
        fields = [str(name) for name in raw_fields]
    elif isinstance(raw_fields, (list, tuple)):
        fields = [str(name) for name in raw_fields]
    else:
        fields = [str(raw_fields)]
    return reason, message, fields


def classify_response(
    status_code: int,
    payload: Any = None,
    *,
    field_order: Sequence[str] = (),
    resource_name: str = "resource",
) -> TicketingError:
    """Map an HTTP error status and body to an error instance.

    Returns a ``TransportError`` for statuses outside the API's error
    contract so that callers never mistake them for success.
    """
    reason, message, fields = _extract_error(payload)
    fields = order_fields(fields, field_order)

    kind = ERROR_KINDS.get(reason)
    if kind is None:
        kind = STATUS_KINDS.get(status_code)
        if status_code == 422 and reason in CANNOT_MODIFY_REASONS:
            kind = InvalidStateError
        elif status_code == 409 and reason in DELETION_BLOCKED_REASONS:
            kind = ResourceIndelibleError

    if kind is None:
        logger.warning(f"Unclassified API response status {status_code}: {payload!r}")
        return TransportError(
            message or f"Unexpected response status {status_code}.",
            status_code=status_code,
        )

    if not message:
        message = _default_message(kind, status_code, fields, resource_name)
    return kind(message, status_code=status_code, fields=fields)


def classify_validation_error(
    exc: ValidationError,
    field_order: Sequence[str] = (),
    only: Iterable[str] | None = None,
) -> BadDataError | None:
    """Translate a pydantic ``ValidationError`` into a ``BadDataError``.

    Missing fields take precedence over unrecognised ones, which take
    precedence over invalid values. When ``only`` is given, errors on other
    fields are ignored; ``None`` is returned if nothing remains.
    """
    scope = set(only) if only is not None else None
    missing: list[str] = []
    unrecognised: list[str] = []
    invalid: list[str] = []

    for error in exc.errors():
        if not error["loc"]:
            continue
        name = str(error["loc"][0])
        if scope is not None and name not in scope:
            continue
        if error["type"] == "missing":
            missing.append(name)
        elif error["type"] == "extra_forbidden":
            unrecognised.append(name)
        else:
            invalid.append(name)

    if missing:
        fields = order_fields(missing, field_order)
        return BadDataError(required_message(fields), fields=fields)
    if unrecognised:
        fields = order_fields(unrecognised, field_order)
        return BadDataError(unrecognised_message(fields), fields=fields)
    if invalid:
        fields = order_fields(invalid, field_order)
        return BadDataError(invalid_message(fields), fields=fields)
    return None

from typing import Sequence


class TicketingError(Exception):
    """Base exception for TickeTing SDK errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"<{type(self).__name__} ({self.status_code}): '{self.message}'>"


class TransportError(TicketingError):
    """Network failure or a response status outside the API's error contract."""

    pass


class ApiError(TicketingError):
    """Base class for the typed errors reported by the TickeTing API."""

    code = "api_error"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        fields: Sequence[str] | None = None,
    ):
        super().__init__(message, status_code=status_code)
        self.fields = list(fields or [])


class BadDataError(ApiError):
    """Required arguments are missing or supplied values are invalid."""

    code = "bad_data"


class InvalidStateError(ApiError):
    """The resource cannot be modified in its current state."""

    code = "invalid_state"


class PageAccessError(ApiError):
    """A page outside the available range was requested."""

    code = "page_access"


class PermissionError(ApiError):
    """The API key is valid but may not perform this action."""

    code = "permission"


class ResourceExistsError(ApiError):
    """Supplied values conflict with another resource."""

    code = "resource_exists"


class ResourceIndelibleError(ApiError):
    """The resource is protected from deletion."""

    code = "resource_indelible"


class ResourceNotFoundError(ApiError):
    """No resource exists at the requested URI."""

    code = "resource_not_found"


class UnauthorisedError(ApiError):
    """The API key is missing or was rejected."""

    code = "unauthorised"


class UnsupportedCriteriaError(ApiError):
    """A list filter names a field the endpoint cannot filter on."""

    code = "unsupported_criteria"


class UnsupportedOperationError(ApiError):
    """The operation is not enabled for this resource."""

    code = "unsupported_operation"


class UnsupportedSortError(ApiError):
    """A list sort names a field or direction the endpoint does not support."""

    code = "unsupported_sort"


ERROR_KINDS: dict[str, type[ApiError]] = {
    kind.code: kind
    for kind in (
        BadDataError,
        InvalidStateError,
        PageAccessError,
        PermissionError,
        ResourceExistsError,
        ResourceIndelibleError,
        ResourceNotFoundError,
        UnauthorisedError,
        UnsupportedCriteriaError,
        UnsupportedOperationError,
        UnsupportedSortError,
    )
}

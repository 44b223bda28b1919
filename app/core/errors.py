"""Domain errors raised by the tour scheduling and property search services.

Each error carries the HTTP status it maps to so the API layer can render it
without a lookup table; the services themselves never import FastAPI.
"""

from typing import Optional


class TourServiceError(Exception):
    """Base class for every domain failure surfaced to callers."""

    status_code = 400
    kind = "error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind, "field": self.field}


class ValidationError(TourServiceError):
    """Malformed input, rejected before the store is touched."""

    status_code = 400
    kind = "validation_error"


class NotFoundError(TourServiceError):
    status_code = 404
    kind = "not_found"

    def __init__(self, resource: str, resource_id, field: Optional[str] = None):
        super().__init__(f"{resource.capitalize()} {resource_id} not found", field=field)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(TourServiceError):
    """The requested slot overlaps an active tour."""

    status_code = 409
    kind = "conflict"


class InvalidTransitionError(TourServiceError):
    status_code = 409
    kind = "invalid_transition"

    def __init__(self, current, requested):
        current_value = getattr(current, "value", current)
        requested_value = getattr(requested, "value", requested)
        super().__init__(
            f"Cannot move tour from '{current_value}' to '{requested_value}'",
            field="status",
        )
        self.current = current
        self.requested = requested


class AuthorizationError(TourServiceError):
    status_code = 403
    kind = "forbidden"

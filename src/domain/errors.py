"""
Error taxonomy shared by every lifecycle component.

Each error carries the HTTP status it maps to; the API layer registers a
single handler for :class:`MarketplaceError`.
"""


class MarketplaceError(Exception):
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequest(MarketplaceError):
    status_code = 400
    default_detail = "Bad request"


class Unauthorized(MarketplaceError):
    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(MarketplaceError):
    status_code = 403
    default_detail = "Forbidden"


class NotFound(MarketplaceError):
    status_code = 404
    default_detail = "Not found"


class Conflict(MarketplaceError):
    status_code = 409
    default_detail = "Conflict"


class InvalidStateTransition(Conflict):
    """Raised when a status change violates a resource state machine."""

"""Domain errors raised by the service layer.

Each carries the HTTP status the API answers with; ``main`` registers a
single handler that renders them as ``{"detail": ...}``.
"""


class MarketplaceError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidRequest(MarketplaceError):
    status_code = 400


class Unauthorized(MarketplaceError):
    # 401 is kept for missing or expired sessions
    status_code = 403


class NotFound(MarketplaceError):
    status_code = 404


class Conflict(MarketplaceError):
    status_code = 409

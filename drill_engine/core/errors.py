"""Error taxonomy for the drill engine.

Every error carries the HTTP status and the short machine code the API
returns as ``{"error": code, "detail": detail}``.
"""


class DrillEngineError(Exception):
    status_code = 500
    code = "server_error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.code)
        self.detail = detail

    def to_dict(self) -> dict:
        body = {"error": self.code}
        if self.detail:
            body["detail"] = self.detail
        return body


class SubmissionValidationError(DrillEngineError):
    """Malformed or out-of-set answer / drill type. Caller may resubmit."""

    status_code = 400
    code = "validation_error"


class AuthorizationError(DrillEngineError):
    """Missing or invalid caller identity."""

    status_code = 401
    code = "unauthorized"


class EntryNotFoundError(AuthorizationError):
    """Row does not exist or belongs to another user."""

    status_code = 404
    code = "not_found"


class ConflictError(DrillEngineError):
    """Queue row was advanced by another request since it was read."""

    status_code = 409
    code = "conflict"


class PersistenceError(DrillEngineError):
    status_code = 500
    code = "persistence_error"


class AggregatorError(DrillEngineError):
    """Skill-rating update failed. Never surfaced to the caller."""

    code = "aggregator_error"

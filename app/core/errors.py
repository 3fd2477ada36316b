# File: app/core/errors.py
"""Service error taxonomy. Handlers in app.main render these as {"message", "error"}."""

from typing import Iterable, Optional


class ServiceError(Exception):
    status_code = 500
    code = "unexpected"
    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"message": self.message, "error": self.code}


class ValidationFailed(ServiceError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Not authenticated"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"
    default_message = "forbidden"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidTransition(ServiceError):
    status_code = 400
    code = "invalid_transition"

    def __init__(self, current: str, target: str, allowed: Iterable[str]):
        self.current = current
        self.target = target
        self.allowed = list(allowed)
        if self.allowed:
            msg = f"Cannot change status from {current} to {target}; allowed: {', '.join(self.allowed)}"
        else:
            msg = f"Cannot change status from {current} to {target}; no further transitions allowed"
        super().__init__(msg)

    def to_body(self) -> dict:
        body = super().to_body()
        body["allowed"] = self.allowed
        return body


class QuotaExceeded(ServiceError):
    status_code = 403
    code = "quota_exceeded"
    default_message = "Free accounts can have at most 3 open issues. Upgrade to premium to report more."


class DuplicateVote(ServiceError):
    status_code = 400
    code = "duplicate_vote"
    default_message = "Already upvoted"


class AlreadyBoosted(ServiceError):
    status_code = 400
    code = "already_boosted"
    default_message = "Issue is already boosted"


class Unexpected(ServiceError):
    status_code = 500
    code = "unexpected"


class ProviderError(Unexpected):
    # payment provider unreachable or refused the request
    default_message = "Payment provider error"

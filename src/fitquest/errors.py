"""Typed errors raised by the fitquest core.

Every error carries an HTTP-style status code and a short machine code so the
web layer can render it without knowing about individual error kinds.
"""


class FitQuestError(Exception):
    """Base class for all expected failures."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        data = {"error": self.message, "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(FitQuestError):
    """Malformed or out-of-range input."""

    status_code = 400
    code = "BAD_REQUEST"


class NotFound(FitQuestError):
    """A profile, program, session or exercise does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ProfileNotFound(NotFound):
    """No user profile exists for the given user key."""

    def __init__(self, user_key: str):
        super().__init__("User profile not found", {"user_key": user_key})


class Conflict(FitQuestError):
    """A unique-key violation that upsert logic did not absorb."""

    status_code = 409
    code = "CONFLICT"


class QuotaExceeded(FitQuestError):
    """The per-user daily request counter is exhausted."""

    status_code = 429
    code = "RATE_LIMITED"


class UpstreamUnavailable(FitQuestError):
    """A third-party service failed, was rate limited or is not configured."""

    status_code = 503
    code = "SERVICE_UNAVAILABLE"


class GenerationParseError(FitQuestError):
    """The text-generation reply did not contain a usable JSON object."""

    status_code = 500
    code = "GENERATION_PARSE_ERROR"

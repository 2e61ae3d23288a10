"""
Error taxonomy for course resolution.

ValidationError and PersistenceError are hard failures (400 / 500 at the HTTP edge).
ConfigurationError, UpstreamCallError and NoMatchError are soft: the course row
stays unenriched and a later resolve call retries enrichment.
"""

from typing import Optional


class ResolverError(Exception):
    """Base class for everything the resolver raises internally."""


class ValidationError(ResolverError):
    """Missing or invalid request fields. Raised before any side effect."""


class ConfigurationError(ResolverError):
    """No catalog credential configured."""


class UpstreamCallError(ResolverError):
    """Non-2xx, malformed JSON or transport failure from the catalog or geocoder."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def as_debug(self) -> dict:
        out: dict = {"error": self.message}
        if self.status is not None:
            out["status"] = self.status
        return out


class NoMatchError(ResolverError):
    """Every planned query was exhausted without an acceptable candidate."""

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        # MatchOutcome with the per-query diagnostic trail
        self.outcome = outcome


class PersistenceError(ResolverError):
    """A store read or write failed."""

    def __init__(self, message: str, course_id: Optional[int] = None):
        super().__init__(message)
        self.course_id = course_id

"""Exception hierarchy shared by the stores, publishers and orchestrator.

Each error carries the HTTP-style ``status_code`` a caller should surface:
400-class for bad input or illegal transitions, 404 for unknown ids and 500
for failures of an external collaborator (potentially transient).
"""

from __future__ import annotations


class TrendpostError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"message": self.message, "status_code": self.status_code}
        if self.details:
            payload["details"] = self.details
        return payload


class NoProviderConfigured(TrendpostError):
    """No publishing destination has its credentials configured."""

    status_code = 400


class InvalidInput(TrendpostError):
    status_code = 400


class InvalidState(TrendpostError):
    """A content item is not in the status the operation requires."""

    status_code = 400


class ProviderNotConfigured(TrendpostError):
    """A specific destination was used without its credentials."""

    status_code = 400


class NotFound(TrendpostError):
    status_code = 404


class UpstreamFailure(TrendpostError):
    """An LLM, trend source or publishing API call failed."""

    status_code = 500

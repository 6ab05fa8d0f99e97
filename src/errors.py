"""Exception taxonomy for ClearlyDefined API interaction.

Callers can tell apart a request that never reached the service
(HttpError), a service that answered with a failure status
(HttpStatusError), a body that could not be decoded (JsonError) and
bad local input (OtherError).
"""
from __future__ import annotations

from typing import Optional


class ClearlyDefinedError(Exception):
    """Base class for every error raised by this package."""


class HttpError(ClearlyDefinedError):
    """Transport failure while building or issuing a request."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class HttpStatusError(ClearlyDefinedError):
    """The service responded with a non-success status code.

    ClearlyDefined does not emit structured error bodies, so only the
    status is kept.
    """

    def __init__(self, status_code: int):
        super().__init__(f"HTTP status {status_code}")
        self.status_code = status_code


class JsonError(ClearlyDefinedError):
    """A response payload could not be decoded."""


class OtherError(ClearlyDefinedError):
    """Input validation failure local to this package."""


class CoordinateError(OtherError):
    """A coordinate, shape or provider string could not be parsed.

    Args:
        message: Human-readable description.
        text: The offending input.
        segment: Name of the positional segment that failed, if known.
    """

    def __init__(self, message: str, text: str, segment: Optional[str] = None):
        super().__init__(message)
        self.text = text
        self.segment = segment

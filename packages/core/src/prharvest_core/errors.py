"""Error taxonomy for an extraction run.

Every failure aborts the whole run: nothing is exported unless the full
record set was assembled. The CLI catches ExtractionError and turns the
message into a non-zero exit.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for all failures raised while extracting review data."""


class ConfigError(ExtractionError):
    """Missing or invalid settings, detected before any request is made."""


class TransportError(ExtractionError):
    """The backend could not be reached or answered with an unexpected status."""


class AuthError(TransportError):
    """The backend rejected the credentials (401/403)."""


class NotFoundError(ExtractionError):
    """The pull/merge request, project or repository does not exist."""


class RateLimitError(ExtractionError):
    """The backend refused the request because of API rate limiting."""


class DataShapeError(ExtractionError):
    """A payload or page did not have the structure the extractor relies on."""

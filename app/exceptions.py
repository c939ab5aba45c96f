"""
Exceptions for tide data operations.
"""


class TideServiceError(Exception):
    """Base exception for tide-related errors."""

    pass


class ServiceUnavailable(TideServiceError):
    """The prediction service could not be reached or returned a non-success status."""

    pass


class InvalidResponse(TideServiceError):
    """The prediction service returned a payload that is not a list of predictions."""

    pass


class EmptySeries(TideServiceError):
    """A height was requested from a series with no samples."""

    pass


class StationCatalogError(TideServiceError):
    """The station catalog is empty or otherwise misconfigured."""

    pass

"""Exceptions raised by the viewer core."""

from __future__ import annotations


class ViewerError(Exception):
    """Base class for viewer core errors."""


class ResourceError(ViewerError):
    """A fetched IIIF resource has an unexpected or empty type.

    `url` identifies the offending resource.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url

    @classmethod
    def invalid_response(cls, url: str) -> ResourceError:
        """Build the error raised for a payload that is not what the caller asked for."""
        return cls(f"Invalid or empty response received from {url}", url=url)

"""
Error types surfaced by the search pipeline.

Only transport and parse failures abort a query; malformed individual records are
absorbed by the enrichment steps and never show up here.
"""

from __future__ import annotations


class PhotoscopeError(Exception):
    """Base class for PhotoScope errors."""


class TransportError(PhotoscopeError):
    """The upstream call failed (network, DNS, timeout)."""


class UpstreamStatusError(TransportError):
    """The upstream answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ParseError(PhotoscopeError):
    """The upstream body is not JSON or lacks the `data` record array."""


class MissingCredentialsError(PhotoscopeError, RuntimeError):
    """No access token is configured."""

"""
Error taxonomy for the media server client.

Transport errors describe what went wrong on the wire. Domain errors describe
why a catalog operation or playback session could not complete. Managers
translate the former into the latter; nothing here is fatal to the process.
"""

from __future__ import annotations

from typing import Optional


class MediaClientError(RuntimeError):
    """Base class for every error raised by the client core."""


# ------------------------------------------------------------
# Transport
# ------------------------------------------------------------

class TransportError(MediaClientError):
    """Raised for any failed server request."""

    def __init__(self, message: str, *, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NetworkError(TransportError):
    """Server unreachable, connection dropped, or request timed out."""


class HttpStatusError(TransportError):
    """Server answered with a non-2xx status."""

    def __init__(self, status: int, *, url: Optional[str] = None, body: str = ""):
        super().__init__(f"HTTP error {status}", url=url)
        self.status = status
        self.body = body


class DecodeError(TransportError):
    """Response declared JSON but the body could not be parsed."""


# ------------------------------------------------------------
# Catalog
# ------------------------------------------------------------

class RescanFailed(MediaClientError):
    """Server acknowledged a rescan request negatively."""


# ------------------------------------------------------------
# Playback sessions
# ------------------------------------------------------------

class CreationFailed(MediaClientError):
    """Stream creation was refused or could not be requested."""

    def __init__(self, message: str = "creation failed"):
        super().__init__(message)


class PreparationError(MediaClientError):
    """Server reported an error while preparing the stream."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreparationTimeout(MediaClientError):
    """Polling budget exhausted before the stream became ready."""


class CapabilityError(MediaClientError):
    """No playback engine is available on this system."""

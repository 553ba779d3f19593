"""Exception hierarchy for the nextcloud_ops library."""

from __future__ import annotations


class NextcloudError(Exception):
    """Base exception for all nextcloud_ops errors."""

    pass


class ParseError(NextcloudError):
    """Raised when a server response does not have the expected structure."""

    pass


class SessionError(NextcloudError):
    """Raised when there's an issue with the client connection state."""

    pass

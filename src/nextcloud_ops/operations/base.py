"""Base class shared by all remote operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Generic, TypeVar

from nextcloud_ops.result import RemoteOperationResult

if TYPE_CHECKING:
    from nextcloud_ops.client import NextcloudClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_remote_path(remote_path: str) -> str:
    """Ensure a server-relative, forward-slash path with a leading slash.

    Raises:
        ValueError: If the path is empty or uses backslashes
    """
    if not remote_path:
        raise ValueError("Remote path is required")
    if "\\" in remote_path:
        raise ValueError(f"Remote path must use forward slashes: {remote_path!r}")
    if not remote_path.startswith("/"):
        remote_path = "/" + remote_path
    return remote_path


def require_positive_id(value: int, name: str) -> int:
    """Validate a server identifier.

    Raises:
        ValueError: If the value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


class RemoteOperation(Generic[T]):
    """A single server action returning a RemoteOperationResult.

    Subclasses implement ``run()``; ``execute()`` is the exception boundary,
    so callers always get a result and never an exception.
    """

    #: Prefix of the log line written when the operation fails.
    failure_message = "Remote operation failed"

    def execute(self, client: NextcloudClient) -> RemoteOperationResult[T]:
        """Run the operation against an authenticated client."""
        try:
            result = self.run(client)
        except Exception as e:
            result = RemoteOperationResult.from_exception(e)
            logger.error(f"{self.failure_message}: {result.log_message}")
            return result
        if not result.success:
            logger.error(f"{self.failure_message}: {result.log_message}")
        return result

    def run(self, client: NextcloudClient) -> RemoteOperationResult[T]:
        raise NotImplementedError

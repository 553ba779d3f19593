"""Server status discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nextcloud_ops.exceptions import ParseError
from nextcloud_ops.methods import GetMethod
from nextcloud_ops.models import NextcloudVersion, ServerInfo
from nextcloud_ops.operations.base import RemoteOperation
from nextcloud_ops.result import RemoteOperationResult

if TYPE_CHECKING:
    from nextcloud_ops.client import NextcloudClient

STATUS_ENDPOINT = "/status.php"


def parse_status(payload: Any) -> ServerInfo:
    """Build ServerInfo from the status.php JSON document.

    Raises:
        ParseError: If the version is missing or not a dotted number
    """
    try:
        version = NextcloudVersion.parse(payload["version"])
        return ServerInfo(
            version=version,
            version_string=str(payload.get("versionstring", "")),
            product_name=str(payload.get("productname", "Nextcloud")),
            installed=bool(payload.get("installed", True)),
            maintenance=bool(payload.get("maintenance", False)),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Invalid status response: {e}") from e


class GetServerInfoRemoteOperation(RemoteOperation[ServerInfo]):
    """Read /status.php; the result feeds capability checks."""

    failure_message = "Server status check failed"

    def run(self, client: NextcloudClient) -> RemoteOperationResult[ServerInfo]:
        with GetMethod(client.base_uri + STATUS_ENDPOINT) as method:
            status = client.execute(method)
            info = parse_status(method.response_json()) if status == 200 else None
        return RemoteOperationResult.from_status(status, {200}, info)

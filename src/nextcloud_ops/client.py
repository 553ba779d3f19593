"""NextcloudClient: authenticated connection used by remote operations."""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from nextcloud_ops.exceptions import SessionError
from nextcloud_ops.methods import RemoteMethod
from nextcloud_ops.models import Capability, ServerInfo
from nextcloud_ops.operations.status import GetServerInfoRemoteOperation

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Linux) nextcloud-ops"
DEFAULT_TIMEOUT = 30.0


def known_servers_context(known_servers: str | Path) -> ssl.SSLContext:
    """Build a TLS context trusting the system CAs plus a known-servers file.

    ``known_servers`` is a PEM file of server certificates the user accepted
    earlier; a self-signed certificate listed there is trusted as its own
    anchor, everything else still goes through the standard chain check.

    Raises:
        OSError: If the file cannot be read
        ssl.SSLError: If the file holds no usable certificate
    """
    context = ssl.create_default_context()
    context.load_verify_locations(cafile=str(known_servers))
    logger.debug(f"Loaded known servers from {known_servers}")
    return context


class NextcloudClient:
    """Authenticated HTTP connection to a Nextcloud server.

    Operations only read from the client (base addresses, server info) and
    call ``execute()``, so one client can be shared by operations running on
    different threads.

    Example:
        with NextcloudClient("https://cloud.example.com", "alice", "app-password") as client:
            client.discover_server()
            result = ReadFolderRemoteOperation("/Documents/").execute(client)
    """

    def __init__(
        self,
        base_url: str,
        user_id: str,
        password: str | None = None,
        *,
        server_info: ServerInfo | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool | str | ssl.SSLContext = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server address, e.g. https://cloud.example.com
            user_id: Account user id (also used in WebDAV paths)
            password: Account password or app password
            server_info: Known server info; see discover_server()
            timeout: Request timeout in seconds
            verify: Verify TLS certificates; pass an SSLContext (see
                known_servers_context()) to also trust pinned servers
            transport: Optional httpx transport (retrying, mocked, ...)
        """
        if not base_url:
            raise ValueError("base_url is required")
        self._base_url = base_url.rstrip("/")
        self._user_id = user_id
        self._server_info = server_info
        self._http: httpx.Client | None = httpx.Client(
            auth=(user_id, password) if password is not None else None,
            timeout=timeout,
            verify=verify,
            transport=transport,
            headers={"User-Agent": DEFAULT_USER_AGENT},
        )

    def __enter__(self) -> NextcloudClient:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit context manager."""
        self.close()

    @property
    def base_uri(self) -> str:
        return self._base_url

    @property
    def dav_uri(self) -> str:
        return f"{self._base_url}/remote.php/dav"

    @property
    def dav_files_uri(self) -> str:
        """WebDAV root of the user's files; remote paths are appended to it."""
        return f"{self.dav_uri}/files/{quote(self._user_id)}"

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def server_info(self) -> ServerInfo | None:
        return self._server_info

    @property
    def is_open(self) -> bool:
        return self._http is not None

    def supports(self, capability: Capability) -> bool:
        """Check a capability against the discovered server info.

        Returns False while the server has not been discovered.
        """
        return self._server_info is not None and self._server_info.supports(capability)

    def execute(self, method: RemoteMethod) -> int:
        """Send a method and return the response status code.

        The response stays open on the method until it releases its
        connection.

        Raises:
            SessionError: If the client has been closed
            httpx.HTTPError: On transport failures
        """
        if self._http is None:
            raise SessionError("Client is closed")
        request = method.build_request(self._http)
        logger.debug(f"{request.method} {request.url}")
        response = self._http.send(request, stream=True)
        method.attach_response(response)
        return response.status_code

    def discover_server(self) -> ServerInfo:
        """Fetch the server status and remember it for capability checks.

        Raises:
            SessionError: If the status endpoint could not be read
        """
        result = GetServerInfoRemoteOperation().execute(self)
        if not result.success or result.data is None:
            raise SessionError(f"Server discovery failed: {result.log_message}") from result.exception
        self._server_info = result.data
        logger.info(f"Connected to {result.data.product_name} {result.data.version}")
        return result.data

    def close(self) -> None:
        """Close the client and clean up resources."""
        if self._http is not None:
            self._http.close()
            self._http = None

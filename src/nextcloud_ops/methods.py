"""HTTP method objects executed by NextcloudClient.

A method carries everything needed to build one request and, once executed,
holds the streamed response until ``release_connection()`` is called. Use
methods as context managers so the connection is released on every exit path:

    with DeleteMethod(url, ocs=True) as method:
        status = client.execute(method)
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any

import httpx

from nextcloud_ops.exceptions import ParseError, SessionError

logger = logging.getLogger(__name__)

OCS_HEADERS = {
    "OCS-APIRequest": "true",
    "Accept": "application/json",
}


class RemoteMethod:
    """Base class for a single HTTP request/response exchange."""

    method = "GET"

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | str | IO[bytes] | None = None,
        json_body: Any = None,
        ocs: bool = False,
    ) -> None:
        self.url = url
        self.headers: dict[str, str] = dict(OCS_HEADERS) if ocs else {}
        if headers:
            self.headers.update(headers)
        self.content = content
        self.json_body = json_body
        self._response: httpx.Response | None = None
        self._released = False

    def __enter__(self) -> RemoteMethod:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release_connection()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.url!r})"

    def build_request(self, http: httpx.Client) -> httpx.Request:
        """Build the httpx request for this method."""
        if self.json_body is not None:
            return http.build_request(
                self.method, self.url, headers=self.headers, json=self.json_body
            )
        return http.build_request(
            self.method, self.url, headers=self.headers, content=self.content
        )

    def attach_response(self, response: httpx.Response) -> None:
        """Bind the (streamed) response returned by the client."""
        self._response = response

    @property
    def response(self) -> httpx.Response:
        if self._response is None:
            raise SessionError(f"{self!r} has not been executed")
        return self._response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def response_body(self) -> bytes:
        return self.response.read()

    def response_json(self) -> Any:
        """Decode the response body as JSON.

        Raises:
            ParseError: If the body is not valid JSON
        """
        try:
            return json.loads(self.response_body)
        except ValueError as e:
            raise ParseError(f"Invalid JSON in response: {e}") from e

    def response_header(self, name: str) -> str | None:
        return self.response.headers.get(name)

    @property
    def released(self) -> bool:
        return self._released

    def release_connection(self) -> None:
        """Close the underlying response. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        if self._response is not None:
            self._response.close()
            logger.debug(f"Released connection for {self!r}")


class GetMethod(RemoteMethod):
    method = "GET"


class PostMethod(RemoteMethod):
    method = "POST"


class PutMethod(RemoteMethod):
    method = "PUT"


class DeleteMethod(RemoteMethod):
    method = "DELETE"


class MkColMethod(RemoteMethod):
    method = "MKCOL"


class PropFindMethod(RemoteMethod):
    """WebDAV PROPFIND with an XML body and a Depth header."""

    method = "PROPFIND"

    def __init__(self, url: str, body: str, depth: int = 1) -> None:
        super().__init__(
            url,
            headers={
                "Depth": str(depth),
                "Content-Type": "application/xml; charset=utf-8",
            },
            content=body.encode("utf-8"),
        )
        self.depth = depth

"""WebDAV file operations: read folder/file, create folder, upload, remove."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote, urlparse

from nextcloud_ops.exceptions import ParseError
from nextcloud_ops.methods import DeleteMethod, MkColMethod, PropFindMethod, PutMethod
from nextcloud_ops.models import Capability, RemoteFile
from nextcloud_ops.operations.base import RemoteOperation, normalize_remote_path
from nextcloud_ops.result import RemoteOperationResult, ResultCode
from nextcloud_ops.webdav import build_propfind_body, parse_read_folder_response

if TYPE_CHECKING:
    from nextcloud_ops.client import NextcloudClient

logger = logging.getLogger(__name__)

MULTI_STATUS = 207


def _dav_url(client: NextcloudClient, remote_path: str) -> str:
    return client.dav_files_uri + quote(remote_path)


def _propfind(
    client: NextcloudClient, remote_path: str, depth: int
) -> tuple[int, list[RemoteFile] | None]:
    tags_supported = client.supports(Capability.TAGS)
    body = build_propfind_body(tags_supported)
    with PropFindMethod(_dav_url(client, remote_path), body, depth=depth) as method:
        status = client.execute(method)
        if status != MULTI_STATUS:
            return status, None
        files = parse_read_folder_response(
            method.response_body,
            urlparse(client.dav_files_uri).path,
            tags_supported=tags_supported,
        )
        return status, files


class ReadFolderRemoteOperation(RemoteOperation[list[RemoteFile]]):
    """List a folder: the folder itself followed by its direct children."""

    failure_message = "Read folder failed"

    def __init__(self, remote_path: str) -> None:
        remote_path = normalize_remote_path(remote_path)
        if not remote_path.endswith("/"):
            remote_path += "/"
        self.remote_path = remote_path

    def run(self, client: NextcloudClient) -> RemoteOperationResult[list[RemoteFile]]:
        status, files = _propfind(client, self.remote_path, depth=1)
        result = RemoteOperationResult.from_status(status, {MULTI_STATUS}, files)
        if result.success and files is not None:
            logger.info(f"Read folder {self.remote_path}: {len(files) - 1} children")
        return result


class ReadFileRemoteOperation(RemoteOperation[RemoteFile]):
    """Read the properties of a single file or folder."""

    failure_message = "Read file failed"

    def __init__(self, remote_path: str) -> None:
        self.remote_path = normalize_remote_path(remote_path)

    def run(self, client: NextcloudClient) -> RemoteOperationResult[RemoteFile]:
        status, files = _propfind(client, self.remote_path, depth=0)
        if status == MULTI_STATUS and not files:
            raise ParseError(f"Empty multistatus for {self.remote_path}")
        return RemoteOperationResult.from_status(
            status, {MULTI_STATUS}, files[0] if files else None
        )


class CreateFolderRemoteOperation(RemoteOperation[None]):
    """Create a folder, optionally creating missing parents."""

    failure_message = "Create folder failed"

    def __init__(self, remote_path: str, create_full_path: bool = False) -> None:
        self.remote_path = normalize_remote_path(remote_path)
        if self.remote_path.rstrip("/") == "":
            raise ValueError("Cannot create root folder")
        self.create_full_path = create_full_path

    def _mkcol(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        with MkColMethod(_dav_url(client, self.remote_path)) as method:
            status = client.execute(method)
        return RemoteOperationResult.from_status(
            status,
            {201},
            failure_code=ResultCode.FOLDER_ALREADY_EXISTS if status == 405 else None,
        )

    def run(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        result = self._mkcol(client)
        if result.code is ResultCode.CONFLICT and self.create_full_path:
            # 409: the parent folder does not exist yet
            parent = posixpath.dirname(self.remote_path.rstrip("/"))
            if parent and parent != "/":
                parent_result = CreateFolderRemoteOperation(parent, True).run(client)
                if not parent_result.success and (
                    parent_result.code is not ResultCode.FOLDER_ALREADY_EXISTS
                ):
                    return parent_result
                result = self._mkcol(client)
        if result.success:
            logger.info(f"Created folder: {self.remote_path}")
        return result


class UploadFileRemoteOperation(RemoteOperation[str]):
    """Upload a local file; the payload is the new etag when the server sends one."""

    failure_message = "Upload failed"

    def __init__(
        self,
        local_path: str | Path,
        remote_path: str,
        mime_type: str,
        last_modification_timestamp: int,
    ) -> None:
        self.local_path = Path(local_path)
        self.remote_path = normalize_remote_path(remote_path)
        self.mime_type = mime_type
        self.last_modification_timestamp = last_modification_timestamp

    def run(self, client: NextcloudClient) -> RemoteOperationResult[str]:
        headers = {
            "Content-Type": self.mime_type,
            "X-OC-MTime": str(self.last_modification_timestamp),
            "OC-Total-Length": str(self.local_path.stat().st_size),
        }
        with self.local_path.open("rb") as content, PutMethod(
            _dav_url(client, self.remote_path), headers=headers, content=content
        ) as method:
            status = client.execute(method)
            etag = method.response_header("OC-ETag") or method.response_header("ETag")
        result = RemoteOperationResult.from_status(
            status, {200, 201, 204}, etag.strip('"') if etag else None
        )
        if result.success:
            logger.info(f"Successfully uploaded {self.local_path.name} to {self.remote_path}")
        return result


class RemoveFileRemoteOperation(RemoteOperation[None]):
    """Delete a file or folder."""

    failure_message = "Remove failed"

    def __init__(self, remote_path: str) -> None:
        self.remote_path = normalize_remote_path(remote_path)

    def run(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        with DeleteMethod(_dav_url(client, self.remote_path)) as method:
            status = client.execute(method)
        return RemoteOperationResult.from_status(status, {204})

"""System tag operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nextcloud_ops.methods import DeleteMethod, PostMethod, PropFindMethod, PutMethod
from nextcloud_ops.models import Tag
from nextcloud_ops.operations.base import RemoteOperation, require_positive_id
from nextcloud_ops.result import RemoteOperationResult
from nextcloud_ops.webdav import build_tags_propfind_body, parse_tags_response

if TYPE_CHECKING:
    from nextcloud_ops.client import NextcloudClient

logger = logging.getLogger(__name__)

TAGS_ENDPOINT = "/systemtags/"
RELATIONS_ENDPOINT = "/systemtags-relations/files/"


def _relation_url(client: NextcloudClient, tag_id: int, file_id: int) -> str:
    return f"{client.dav_uri}{RELATIONS_ENDPOINT}{file_id}/{tag_id}"


def _tag_id_from_location(location: str | None) -> int | None:
    """Extract the new tag id from a Content-Location like /remote.php/dav/systemtags/12."""
    if not location:
        return None
    last = location.rstrip("/").rsplit("/", 1)[-1]
    return int(last) if last.isdigit() else None


class CreateTagRemoteOperation(RemoteOperation[int]):
    """Create a user visible, assignable tag; the payload is its id if reported."""

    failure_message = "Create tag failed"

    def __init__(self, name: str) -> None:
        if not name or not name.strip():
            raise ValueError("Tag name is required")
        self.name = name

    def run(self, client: NextcloudClient) -> RemoteOperationResult[int]:
        body = {"name": self.name, "userVisible": True, "userAssignable": True}
        with PostMethod(client.dav_uri + TAGS_ENDPOINT, json_body=body) as method:
            status = client.execute(method)
            tag_id = _tag_id_from_location(method.response_header("Content-Location"))
        result = RemoteOperationResult.from_status(status, {201}, tag_id)
        if result.success:
            logger.info(f"Created tag {self.name!r}")
        return result


class GetTagsRemoteOperation(RemoteOperation[list[Tag]]):
    """List all system tags visible to the user."""

    failure_message = "Get tags failed"

    def run(self, client: NextcloudClient) -> RemoteOperationResult[list[Tag]]:
        with PropFindMethod(
            client.dav_uri + TAGS_ENDPOINT, build_tags_propfind_body(), depth=1
        ) as method:
            status = client.execute(method)
            tags = parse_tags_response(method.response_body) if status == 207 else None
        return RemoteOperationResult.from_status(status, {207}, tags)


class PutTagRemoteOperation(RemoteOperation[None]):
    """Assign a tag to a file, identified by its local id."""

    failure_message = "Put tag failed"

    def __init__(self, tag_id: int, file_id: int) -> None:
        self.tag_id = require_positive_id(tag_id, "tag_id")
        self.file_id = require_positive_id(file_id, "file_id")

    def run(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        with PutMethod(_relation_url(client, self.tag_id, self.file_id)) as method:
            status = client.execute(method)
        return RemoteOperationResult.from_status(status, {201})


class RemoveTagRemoteOperation(RemoteOperation[None]):
    """Unassign a tag from a file."""

    failure_message = "Remove tag failed"

    def __init__(self, tag_id: int, file_id: int) -> None:
        self.tag_id = require_positive_id(tag_id, "tag_id")
        self.file_id = require_positive_id(file_id, "file_id")

    def run(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        with DeleteMethod(_relation_url(client, self.tag_id, self.file_id)) as method:
            status = client.execute(method)
        return RemoteOperationResult.from_status(status, {204})


class DeleteTagRemoteOperation(RemoteOperation[None]):
    """Delete a tag from the server (and from every file carrying it)."""

    failure_message = "Delete tag failed"

    def __init__(self, tag_id: int) -> None:
        self.tag_id = require_positive_id(tag_id, "tag_id")

    def run(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        with DeleteMethod(f"{client.dav_uri}{TAGS_ENDPOINT}{self.tag_id}") as method:
            status = client.execute(method)
        return RemoteOperationResult.from_status(status, {204})

"""Assistant text-processing task operations (OCS API)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from nextcloud_ops.exceptions import ParseError
from nextcloud_ops.methods import DeleteMethod, GetMethod
from nextcloud_ops.models import Task
from nextcloud_ops.operations.base import RemoteOperation, require_positive_id
from nextcloud_ops.result import RemoteOperationResult

if TYPE_CHECKING:
    from nextcloud_ops.client import NextcloudClient

TASK_ENDPOINT = "/ocs/v2.php/textprocessing/task/"
TASK_LIST_ENDPOINT = "/ocs/v2.php/textprocessing/tasks/app/"

HTTP_OK = 200


def _parse_task(raw: dict[str, Any]) -> Task:
    return Task(
        id=int(raw["id"]),
        type=str(raw["type"]),
        status=int(raw["status"]),
        app_id=str(raw.get("appId", "")),
        input=str(raw.get("input", "")),
        output=raw.get("output"),
        identifier=raw.get("identifier") or None,
    )


def parse_task_list(payload: Any) -> list[Task]:
    """Extract tasks from an OCS ``{"ocs": {"data": {"tasks": [...]}}}`` envelope.

    Raises:
        ParseError: If the envelope or a task is malformed
    """
    try:
        raw_tasks = payload["ocs"]["data"]["tasks"]
        return [_parse_task(raw) for raw in raw_tasks]
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Invalid task list response: {e}") from e


class GetTaskListRemoteOperation(RemoteOperation[list[Task]]):
    """List the current user's tasks scheduled by an app."""

    failure_message = "Get task list failed"

    def __init__(self, app_id: str = "assistant") -> None:
        if not app_id:
            raise ValueError("app_id is required")
        self.app_id = app_id

    def run(self, client: NextcloudClient) -> RemoteOperationResult[list[Task]]:
        url = client.base_uri + TASK_LIST_ENDPOINT + quote(self.app_id)
        with GetMethod(url, ocs=True) as method:
            status = client.execute(method)
            tasks = parse_task_list(method.response_json()) if status == HTTP_OK else None
        return RemoteOperationResult.from_status(status, {HTTP_OK}, tasks)


class DeleteTaskRemoteOperation(RemoteOperation[None]):
    """Delete an assistant task. Only HTTP 200 counts as success."""

    failure_message = "Deletion of task failed"

    def __init__(self, task_id: int) -> None:
        self.task_id = require_positive_id(task_id, "task_id")

    def run(self, client: NextcloudClient) -> RemoteOperationResult[None]:
        url = f"{client.base_uri}{TASK_ENDPOINT}{self.task_id}"
        with DeleteMethod(url, ocs=True) as method:
            status = client.execute(method)
        return RemoteOperationResult.from_status(status, {HTTP_OK})

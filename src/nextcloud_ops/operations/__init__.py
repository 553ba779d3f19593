"""Remote operation objects, one per server action."""

from nextcloud_ops.operations.assistant import (
    DeleteTaskRemoteOperation,
    GetTaskListRemoteOperation,
)
from nextcloud_ops.operations.base import RemoteOperation
from nextcloud_ops.operations.files import (
    CreateFolderRemoteOperation,
    ReadFileRemoteOperation,
    ReadFolderRemoteOperation,
    RemoveFileRemoteOperation,
    UploadFileRemoteOperation,
)
from nextcloud_ops.operations.status import GetServerInfoRemoteOperation
from nextcloud_ops.operations.tags import (
    CreateTagRemoteOperation,
    DeleteTagRemoteOperation,
    GetTagsRemoteOperation,
    PutTagRemoteOperation,
    RemoveTagRemoteOperation,
)

__all__ = [
    "RemoteOperation",
    # Files
    "ReadFolderRemoteOperation",
    "ReadFileRemoteOperation",
    "CreateFolderRemoteOperation",
    "UploadFileRemoteOperation",
    "RemoveFileRemoteOperation",
    # Tags
    "CreateTagRemoteOperation",
    "GetTagsRemoteOperation",
    "PutTagRemoteOperation",
    "RemoveTagRemoteOperation",
    "DeleteTagRemoteOperation",
    # Assistant
    "GetTaskListRemoteOperation",
    "DeleteTaskRemoteOperation",
    # Status
    "GetServerInfoRemoteOperation",
]

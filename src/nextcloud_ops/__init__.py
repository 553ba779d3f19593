"""nextcloud-ops - Nextcloud server actions as remote operation objects.

Example usage:
    from nextcloud_ops import NextcloudClient, ReadFolderRemoteOperation

    with NextcloudClient("https://cloud.example.com", "alice", "app-password") as client:
        client.discover_server()
        result = ReadFolderRemoteOperation("/Documents/").execute(client)
        if result.success:
            for remote_file in result.data:
                print(remote_file.remote_path, remote_file.tags)
        else:
            print(result.log_message)
"""

from nextcloud_ops.client import NextcloudClient, known_servers_context
from nextcloud_ops.exceptions import NextcloudError, ParseError, SessionError
from nextcloud_ops.models import (
    NEXTCLOUD_27,
    Capability,
    NextcloudVersion,
    RemoteFile,
    ServerInfo,
    Tag,
    Task,
)
from nextcloud_ops.operations import (
    CreateFolderRemoteOperation,
    CreateTagRemoteOperation,
    DeleteTagRemoteOperation,
    DeleteTaskRemoteOperation,
    GetServerInfoRemoteOperation,
    GetTagsRemoteOperation,
    GetTaskListRemoteOperation,
    PutTagRemoteOperation,
    ReadFileRemoteOperation,
    ReadFolderRemoteOperation,
    RemoteOperation,
    RemoveFileRemoteOperation,
    RemoveTagRemoteOperation,
    UploadFileRemoteOperation,
)
from nextcloud_ops.result import RemoteOperationResult, ResultCode

__version__ = "0.1.0"

__all__ = [
    # Main client
    "NextcloudClient",
    "known_servers_context",
    # Results
    "RemoteOperationResult",
    "ResultCode",
    # Models
    "RemoteFile",
    "Tag",
    "Task",
    "ServerInfo",
    "NextcloudVersion",
    "Capability",
    "NEXTCLOUD_27",
    # Operations
    "RemoteOperation",
    "ReadFolderRemoteOperation",
    "ReadFileRemoteOperation",
    "CreateFolderRemoteOperation",
    "UploadFileRemoteOperation",
    "RemoveFileRemoteOperation",
    "CreateTagRemoteOperation",
    "GetTagsRemoteOperation",
    "PutTagRemoteOperation",
    "RemoveTagRemoteOperation",
    "DeleteTagRemoteOperation",
    "GetTaskListRemoteOperation",
    "DeleteTaskRemoteOperation",
    "GetServerInfoRemoteOperation",
    # Exceptions
    "NextcloudError",
    "ParseError",
    "SessionError",
]

"""Command-line interface for nextcloud_ops."""

from __future__ import annotations

import functools
import logging
import mimetypes
import ssl
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn, TypeVar, cast

import click

from nextcloud_ops import (
    CreateFolderRemoteOperation,
    CreateTagRemoteOperation,
    DeleteTagRemoteOperation,
    DeleteTaskRemoteOperation,
    GetServerInfoRemoteOperation,
    GetTagsRemoteOperation,
    NextcloudClient,
    PutTagRemoteOperation,
    ReadFolderRemoteOperation,
    RemoteOperationResult,
    ServerInfo,
    SessionError,
    UploadFileRemoteOperation,
    known_servers_context,
)
from nextcloud_ops.models import Capability

logger = logging.getLogger(__name__)

T = TypeVar("T")


def connection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the server/user/password options shared by every command."""

    @click.option("--url", "-u", envvar="NEXTCLOUD_URL", help="Server address")
    @click.option("--user", envvar="NEXTCLOUD_USER", help="Account user id")
    @click.option(
        "--password",
        "-p",
        envvar="NEXTCLOUD_PASSWORD",
        help="Account password or app password",
    )
    @click.option(
        "--ca-file",
        envvar="NEXTCLOUD_CA_FILE",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="PEM file of known server certificates to trust",
    )
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return wrapper


def get_client(
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None = None,
) -> NextcloudClient:
    """Create a NextcloudClient, prompting for anything not given."""
    if not url:
        url = click.prompt("Server URL")
    if not user:
        user = click.prompt("User")
    if not password:
        password = click.prompt("Password", hide_input=True)
    verify: bool | ssl.SSLContext = True
    if ca_file is not None:
        try:
            verify = known_servers_context(ca_file)
        except OSError as e:
            _fail(f"Cannot load known servers from {ca_file}: {e}")
    return NextcloudClient(url, user, password, verify=verify)


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _build(factory: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Construct an operation, turning argument errors into a CLI error."""
    try:
        return factory(*args, **kwargs)
    except ValueError as e:
        _fail(str(e))


def _exit_on_failure(result: RemoteOperationResult[Any]) -> None:
    if not result.success:
        _fail(result.log_message)


@click.group()
@click.version_option(package_name="nextcloud-ops")
@click.option("--verbose", "-v", is_flag=True, help="Log requests to stderr")
def main(verbose: bool) -> None:
    """Nextcloud CLI - run single remote operations against a server."""
    if verbose:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@connection_options
def status(
    url: str | None, user: str | None, password: str | None, ca_file: Path | None
) -> None:
    """Show the server version and supported capabilities."""
    with get_client(url, user, password, ca_file) as client:
        result = GetServerInfoRemoteOperation().execute(client)
    _exit_on_failure(result)
    info = cast(ServerInfo, result.data)
    click.echo(f"{info.product_name} {info.version_string or info.version}")
    for capability in Capability:
        flag = "yes" if info.supports(capability) else "no"
        click.echo(f"  {capability.value}: {flag}")


@main.command("ls")
@click.argument("path", default="/")
@connection_options
def list_folder(
    path: str,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """List contents of a folder.

    PATH: Folder path to list (default: /)

    Examples:

        nextcloud-ops ls

        nextcloud-ops ls /Documents
    """
    operation = _build(ReadFolderRemoteOperation, path)
    with get_client(url, user, password, ca_file) as client:
        try:
            client.discover_server()
        except SessionError as e:
            logger.warning(f"Listing without tags: {e}")
        result = operation.execute(client)
    _exit_on_failure(result)

    entries = result.data or []
    children = entries[1:]
    if not children:
        click.echo(f"(empty folder: {path})")
        return
    for entry in children:
        tags = f"  [{', '.join(sorted(entry.tags))}]" if entry.tags else ""
        if entry.is_folder:
            click.echo(click.style(f"  {entry.name}/", fg="blue") + tags)
        else:
            click.echo(f"  {entry.name}  ({_format_size(entry.size)}){tags}")


@main.command()
@click.argument("path")
@click.option("--parents", is_flag=True, help="Create parent folders as needed")
@connection_options
def mkdir(
    path: str,
    parents: bool,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """Create a folder.

    Examples:

        nextcloud-ops mkdir /Documents/Work/Projects --parents
    """
    operation = _build(CreateFolderRemoteOperation, path, create_full_path=parents)
    with get_client(url, user, password, ca_file) as client:
        result = operation.execute(client)
    _exit_on_failure(result)
    click.echo(click.style(f"Created folder: {path}", fg="green"))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("remote_path")
@click.option("--mime-type", "-m", default=None, help="Content type (guessed if omitted)")
@connection_options
def upload(
    file: Path,
    remote_path: str,
    mime_type: str | None,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """Upload FILE to REMOTE_PATH, keeping its modification time.

    Examples:

        nextcloud-ops upload notes.md /Documents/notes.md
    """
    if remote_path.endswith("/"):
        remote_path += file.name
    content_type = mime_type or mimetypes.guess_type(file.name)[0] or "application/octet-stream"
    mtime = int(file.stat().st_mtime)
    operation = _build(UploadFileRemoteOperation, file, remote_path, content_type, mtime)
    with get_client(url, user, password, ca_file) as client:
        result = operation.execute(client)
    _exit_on_failure(result)
    click.echo(click.style("✓ ", fg="green") + f"{file.name} -> {remote_path}")


@main.command("tags")
@connection_options
def list_tags(
    url: str | None, user: str | None, password: str | None, ca_file: Path | None
) -> None:
    """List system tags."""
    with get_client(url, user, password, ca_file) as client:
        result = GetTagsRemoteOperation().execute(client)
    _exit_on_failure(result)
    for tag in result.data or []:
        click.echo(f"  {tag.id}\t{tag.name}")


@main.command("tag-create")
@click.argument("name")
@connection_options
def create_tag(
    name: str,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """Create a tag called NAME."""
    operation = _build(CreateTagRemoteOperation, name)
    with get_client(url, user, password, ca_file) as client:
        result = operation.execute(client)
    _exit_on_failure(result)
    suffix = f" (id {result.data})" if result.data else ""
    click.echo(click.style(f"Created tag: {name}{suffix}", fg="green"))


@main.command("tag-put")
@click.argument("tag_id", type=int)
@click.argument("file_id", type=int)
@connection_options
def put_tag(
    tag_id: int,
    file_id: int,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """Assign tag TAG_ID to the file with local id FILE_ID."""
    operation = _build(PutTagRemoteOperation, tag_id, file_id)
    with get_client(url, user, password, ca_file) as client:
        result = operation.execute(client)
    _exit_on_failure(result)
    click.echo(click.style(f"Tagged file {file_id} with tag {tag_id}", fg="green"))


@main.command("tag-delete")
@click.argument("tag_id", type=int)
@connection_options
def delete_tag(
    tag_id: int,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """Delete tag TAG_ID."""
    operation = _build(DeleteTagRemoteOperation, tag_id)
    with get_client(url, user, password, ca_file) as client:
        result = operation.execute(client)
    _exit_on_failure(result)
    click.echo(click.style(f"Deleted tag {tag_id}", fg="green"))


@main.command("task-delete")
@click.argument("task_id", type=int)
@connection_options
def delete_task(
    task_id: int,
    url: str | None,
    user: str | None,
    password: str | None,
    ca_file: Path | None,
) -> None:
    """Delete assistant task TASK_ID."""
    operation = _build(DeleteTaskRemoteOperation, task_id)
    with get_client(url, user, password, ca_file) as client:
        result = operation.execute(client)
    _exit_on_failure(result)
    click.echo(click.style(f"Deleted task {task_id}", fg="green"))


def _format_size(size_bytes: int) -> str:
    """Format file size in human-readable form."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


if __name__ == "__main__":
    main()

"""Shared test helpers for nextcloud_ops tests."""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote
from xml.sax.saxutils import escape

import httpx

BASE_URL = "https://cloud.example.com"
USER = "alice"
PASSWORD = "app-password"
DAV_FILES_ROOT = f"/remote.php/dav/files/{USER}"
TAGS_ROOT = "/remote.php/dav/systemtags/"
RELATIONS_ROOT = "/remote.php/dav/systemtags-relations/files/"
TASK_ROOT = "/ocs/v2.php/textprocessing/task/"
TASK_LIST_ROOT = "/ocs/v2.php/textprocessing/tasks/app/"
MODIFIED = "Mon, 19 Oct 2026 10:00:00 GMT"

_OK = "<d:status>HTTP/1.1 200 OK</d:status>"
_NOT_FOUND = "<d:status>HTTP/1.1 404 Not Found</d:status>"


def dav_entry(
    path: str,
    file_id: int | None,
    *,
    folder: bool = False,
    tags: list[str] | None = None,
    size: int = 0,
    modified: str | None = MODIFIED,
    content_type: str | None = None,
    etag: str | None = None,
    root: str = DAV_FILES_ROOT,
) -> str:
    """Build one <d:response> block of a file listing."""
    props = [f"<d:resourcetype>{'<d:collection/>' if folder else ''}</d:resourcetype>"]
    if modified is not None:
        props.append(f"<d:getlastmodified>{modified}</d:getlastmodified>")
    if file_id is not None:
        props.append(f"<oc:fileid>{file_id}</oc:fileid>")
    props.append(f"<oc:size>{size}</oc:size>")
    if content_type:
        props.append(f"<d:getcontenttype>{content_type}</d:getcontenttype>")
    if etag:
        props.append(f"<d:getetag>&quot;{etag}&quot;</d:getetag>")
    if tags is not None:
        tag_xml = "".join(f"<nc:system-tag>{escape(t)}</nc:system-tag>" for t in tags)
        props.append(f"<nc:system-tags>{tag_xml}</nc:system-tags>")
    return (
        "<d:response>"
        f"<d:href>{quote(root + path)}</d:href>"
        f"<d:propstat><d:prop>{''.join(props)}</d:prop>{_OK}</d:propstat>"
        "</d:response>"
    )


def tag_entry(tag_id: int, name: str) -> str:
    """Build one <d:response> block of the system tags listing."""
    return (
        "<d:response>"
        f"<d:href>{TAGS_ROOT}{tag_id}</d:href>"
        "<d:propstat><d:prop>"
        f"<oc:id>{tag_id}</oc:id>"
        f"<oc:display-name>{escape(name)}</oc:display-name>"
        "<oc:user-visible>true</oc:user-visible>"
        "<oc:user-assignable>true</oc:user-assignable>"
        f"</d:prop>{_OK}</d:propstat>"
        "</d:response>"
    )


def tags_collection_entry() -> str:
    """The systemtags collection itself, which has no id."""
    return (
        "<d:response>"
        f"<d:href>{TAGS_ROOT}</d:href>"
        "<d:propstat><d:prop><oc:id/><oc:display-name/></d:prop>"
        f"{_NOT_FOUND}</d:propstat>"
        "</d:response>"
    )


def multistatus(*entries: str) -> bytes:
    """Wrap response blocks into a multistatus document."""
    return (
        '<?xml version="1.0"?>'
        '<d:multistatus xmlns:d="DAV:" xmlns:oc="http://owncloud.org/ns"'
        ' xmlns:nc="http://nextcloud.org/ns">'
        + "".join(entries)
        + "</d:multistatus>"
    ).encode("utf-8")


@dataclass
class FakeFile:
    """A file stored by FakeNextcloud."""

    file_id: int
    content_type: str = ""
    size: int = 0
    mtime: str = ""


class FakeNextcloud:
    """In-memory Nextcloud answering the endpoints used by the operations.

    ``overrides`` maps (method, path) to a status code or an exception to
    raise instead of the normal behavior.
    """

    def __init__(self, version: str = "27.1.0.7") -> None:
        self.version = version
        self.requests: list[httpx.Request] = []
        self.folders: dict[str, int] = {"/": 1}
        self.files: dict[str, FakeFile] = {}
        self.tags: dict[int, str] = {}
        self.relations: dict[int, list[int]] = {}
        self.tasks: dict[int, dict[str, Any]] = {}
        self.overrides: dict[tuple[str, str], int | Exception] = {}
        self._next_id = 100

    @property
    def supports_tags(self) -> bool:
        return int(self.version.split(".")[0]) >= 27

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_folder(self, path: str) -> int:
        folder_id = self.new_id()
        self.folders[path.rstrip("/") + "/"] = folder_id
        return folder_id

    def add_file(self, path: str, content_type: str = "text/plain", size: int = 4) -> int:
        file_id = self.new_id()
        self.files[path] = FakeFile(file_id, content_type, size)
        return file_id

    def add_task(self, app_id: str = "assistant", **fields: Any) -> int:
        task_id = self.new_id()
        task = {
            "id": task_id,
            "type": "OCP\\TextProcessing\\FreePromptTaskType",
            "status": 1,
            "userId": USER,
            "appId": app_id,
            "input": "Summarize this",
            "output": None,
            "identifier": "",
        }
        task.update(fields)
        self.tasks[task_id] = task
        return task_id

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.path)
        override = self.overrides.get((request.method, path))
        if isinstance(override, Exception):
            raise override
        if override is not None:
            return httpx.Response(override)

        if path == "/status.php":
            return httpx.Response(
                200,
                json={
                    "installed": True,
                    "maintenance": False,
                    "version": self.version,
                    "versionstring": self.version.rsplit(".", 1)[0],
                    "productname": "Nextcloud",
                },
            )
        if path.startswith(DAV_FILES_ROOT):
            return self._handle_files(request, path[len(DAV_FILES_ROOT):] or "/")
        if path.startswith(RELATIONS_ROOT):
            return self._handle_relation(request, path[len(RELATIONS_ROOT):])
        if path.startswith(TAGS_ROOT):
            return self._handle_tags(request, path[len(TAGS_ROOT):])
        if path.startswith(TASK_ROOT) or path.startswith(TASK_LIST_ROOT):
            return self._handle_tasks(request, path)
        return httpx.Response(404)

    def _file_entry(self, path: str, wants_tags: bool) -> str:
        if path.endswith("/"):
            file_id = self.folders[path]
            tags = self._tag_names(file_id) if wants_tags else None
            return dav_entry(path, file_id, folder=True, tags=tags)
        stored = self.files[path]
        tags = self._tag_names(stored.file_id) if wants_tags else None
        return dav_entry(
            path,
            stored.file_id,
            tags=tags,
            size=stored.size,
            content_type=stored.content_type,
            etag=f"etag-{stored.file_id}",
        )

    def _tag_names(self, file_id: int) -> list[str]:
        return [self.tags[t] for t in self.relations.get(file_id, [])]

    def _children(self, folder: str) -> list[str]:
        children = [
            p for p in self.folders
            if p != folder and p.startswith(folder) and "/" not in p[len(folder):].rstrip("/")
        ]
        children += [
            p for p in self.files if p.startswith(folder) and "/" not in p[len(folder):]
        ]
        return children

    def _parent_exists(self, path: str) -> bool:
        parent = posixpath.dirname(path.rstrip("/"))
        return parent.rstrip("/") + "/" in self.folders

    def _handle_files(self, request: httpx.Request, path: str) -> httpx.Response:
        if request.method == "PROPFIND":
            wants_tags = self.supports_tags and b"system-tags" in request.content
            if path not in self.files and path.rstrip("/") + "/" in self.folders:
                path = path.rstrip("/") + "/"
            if path not in self.files and path not in self.folders:
                return httpx.Response(404)
            entries = [self._file_entry(path, wants_tags)]
            if request.headers.get("Depth") == "1" and path.endswith("/"):
                entries += [self._file_entry(child, wants_tags) for child in self._children(path)]
            return httpx.Response(207, content=multistatus(*entries))

        if request.method == "MKCOL":
            folder = path.rstrip("/") + "/"
            if folder in self.folders or path in self.files:
                return httpx.Response(405)
            if not self._parent_exists(folder):
                return httpx.Response(409)
            self.add_folder(folder)
            return httpx.Response(201)

        if request.method == "PUT":
            if not self._parent_exists(path):
                return httpx.Response(409)
            existing = self.files.get(path)
            content = request.read()
            file_id = existing.file_id if existing else self.new_id()
            self.files[path] = FakeFile(
                file_id,
                request.headers.get("Content-Type", ""),
                len(content),
                request.headers.get("X-OC-MTime", ""),
            )
            return httpx.Response(
                204 if existing else 201, headers={"OC-ETag": f'"etag-{file_id}"'}
            )

        if request.method == "DELETE":
            if path in self.files:
                del self.files[path]
                return httpx.Response(204)
            folder = path.rstrip("/") + "/"
            if folder in self.folders and folder != "/":
                del self.folders[folder]
                return httpx.Response(204)
            return httpx.Response(404)

        return httpx.Response(405)

    def _handle_tags(self, request: httpx.Request, rest: str) -> httpx.Response:
        if request.method == "POST" and rest == "":
            name = json.loads(request.read())["name"]
            if name in self.tags.values():
                return httpx.Response(409)
            tag_id = self.new_id()
            self.tags[tag_id] = name
            return httpx.Response(201, headers={"Content-Location": f"{TAGS_ROOT}{tag_id}"})
        if request.method == "PROPFIND" and rest == "":
            entries = [tags_collection_entry()]
            entries += [tag_entry(tag_id, name) for tag_id, name in self.tags.items()]
            return httpx.Response(207, content=multistatus(*entries))
        if request.method == "DELETE" and rest.isdigit():
            tag_id = int(rest)
            if tag_id not in self.tags:
                return httpx.Response(404)
            del self.tags[tag_id]
            for assigned in self.relations.values():
                if tag_id in assigned:
                    assigned.remove(tag_id)
            return httpx.Response(204)
        return httpx.Response(405)

    def _known_file_ids(self) -> set[int]:
        return {f.file_id for f in self.files.values()} | set(self.folders.values())

    def _handle_relation(self, request: httpx.Request, rest: str) -> httpx.Response:
        file_part, _, tag_part = rest.partition("/")
        if not (file_part.isdigit() and tag_part.isdigit()):
            return httpx.Response(400)
        file_id, tag_id = int(file_part), int(tag_part)
        if file_id not in self._known_file_ids() or tag_id not in self.tags:
            return httpx.Response(404)
        assigned = self.relations.setdefault(file_id, [])
        if request.method == "PUT":
            if tag_id in assigned:
                return httpx.Response(409)
            assigned.append(tag_id)
            return httpx.Response(201)
        if request.method == "DELETE":
            if tag_id not in assigned:
                return httpx.Response(404)
            assigned.remove(tag_id)
            return httpx.Response(204)
        return httpx.Response(405)

    def _handle_tasks(self, request: httpx.Request, path: str) -> httpx.Response:
        if request.headers.get("OCS-APIRequest") != "true":
            return httpx.Response(400)
        if request.method == "GET" and path.startswith(TASK_LIST_ROOT):
            app_id = path[len(TASK_LIST_ROOT):]
            tasks = [t for t in self.tasks.values() if t["appId"] == app_id]
            return httpx.Response(200, json=_ocs({"tasks": tasks}))
        if request.method == "DELETE" and path.startswith(TASK_ROOT):
            rest = path[len(TASK_ROOT):]
            if not rest.isdigit() or int(rest) not in self.tasks:
                return httpx.Response(404, json=_ocs([], status="failure", code=404))
            task = self.tasks.pop(int(rest))
            return httpx.Response(200, json=_ocs({"task": task}))
        return httpx.Response(405)


def _ocs(data: Any, status: str = "ok", code: int = 200) -> dict[str, Any]:
    return {"ocs": {"meta": {"status": status, "statuscode": code, "message": "OK"}, "data": data}}

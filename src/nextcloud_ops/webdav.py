"""WebDAV request bodies and multistatus response parsing."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from urllib.parse import unquote, urlparse

from dateutil import parser as date_parser

from nextcloud_ops.exceptions import ParseError
from nextcloud_ops.models import RemoteFile, Tag

logger = logging.getLogger(__name__)

DAV_NS = "DAV:"
OC_NS = "http://owncloud.org/ns"
NC_NS = "http://nextcloud.org/ns"

NAMESPACES = {"d": DAV_NS, "oc": OC_NS, "nc": NC_NS}

FOLDER_MIME_TYPE = "DIR"

_FILE_PROPERTIES = [
    "d:getlastmodified",
    "d:getetag",
    "d:getcontenttype",
    "d:getcontentlength",
    "d:resourcetype",
    "oc:fileid",
    "oc:id",
    "oc:permissions",
    "oc:size",
    "oc:favorite",
]

_TAG_PROPERTIES = [
    "oc:id",
    "oc:display-name",
    "oc:user-visible",
    "oc:user-assignable",
]


def _propfind_body(properties: list[str]) -> str:
    props = "\n".join(f"    <{p} />" for p in properties)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<d:propfind xmlns:d="{DAV_NS}" xmlns:oc="{OC_NS}" xmlns:nc="{NC_NS}">\n'
        "  <d:prop>\n"
        f"{props}\n"
        "  </d:prop>\n"
        "</d:propfind>\n"
    )


def build_propfind_body(tags_supported: bool) -> str:
    """PROPFIND body for file listings; tags are only requested when supported."""
    properties = list(_FILE_PROPERTIES)
    if tags_supported:
        properties.append("nc:system-tags")
    return _propfind_body(properties)


def build_tags_propfind_body() -> str:
    """PROPFIND body for the system tags collection."""
    return _propfind_body(_TAG_PROPERTIES)


def _parse_multistatus(body: bytes) -> list[ET.Element]:
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ParseError(f"Malformed multistatus XML: {e}") from e
    if root.tag != f"{{{DAV_NS}}}multistatus":
        raise ParseError(f"Expected d:multistatus, got {root.tag}")
    return root.findall("d:response", NAMESPACES)


def _ok_props(response: ET.Element) -> dict[str, ET.Element]:
    """Collect the properties of all successful propstat blocks, keyed by tag."""
    props: dict[str, ET.Element] = {}
    for propstat in response.findall("d:propstat", NAMESPACES):
        status = propstat.findtext("d:status", default="", namespaces=NAMESPACES)
        if status and " 200 " not in f"{status} ":
            continue
        prop = propstat.find("d:prop", NAMESPACES)
        if prop is None:
            continue
        for child in prop:
            props[child.tag] = child
    return props


def _text(props: dict[str, ET.Element], ns: str, name: str) -> str | None:
    element = props.get(f"{{{ns}}}{name}")
    if element is None or element.text is None:
        return None
    return element.text.strip()


def _required(props: dict[str, ET.Element], ns: str, name: str, href: str) -> str:
    value = _text(props, ns, name)
    if not value:
        raise ParseError(f"Missing {name} for {href}")
    return value


def _to_int(value: str, name: str, href: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ParseError(f"Invalid {name} {value!r} for {href}") from e


def _remote_path(href: str, dav_root_path: str, is_folder: bool) -> str:
    path = unquote(urlparse(href).path)
    root = unquote(dav_root_path).rstrip("/")
    if path != root and not path.startswith(root + "/"):
        raise ParseError(f"Entry {href} is outside of {dav_root_path}")
    remote_path = path[len(root):] or "/"
    if is_folder and not remote_path.endswith("/"):
        remote_path += "/"
    return remote_path


def _parse_file(response: ET.Element, dav_root_path: str, tags_supported: bool) -> RemoteFile:
    href = response.findtext("d:href", default="", namespaces=NAMESPACES).strip()
    if not href:
        raise ParseError("Response entry without href")
    props = _ok_props(response)

    resource_type = props.get(f"{{{DAV_NS}}}resourcetype")
    is_folder = (
        resource_type is not None and resource_type.find("d:collection", NAMESPACES) is not None
    )
    remote_path = _remote_path(href, dav_root_path, is_folder)

    local_id = _to_int(_required(props, OC_NS, "fileid", href), "fileid", href)
    modified_raw = _required(props, DAV_NS, "getlastmodified", href)
    try:
        modified = date_parser.parse(modified_raw)
    except (ValueError, OverflowError) as e:
        raise ParseError(f"Invalid getlastmodified {modified_raw!r} for {href}") from e

    size_raw = _text(props, OC_NS, "size") or _text(props, DAV_NS, "getcontentlength")
    size = _to_int(size_raw, "size", href) if size_raw else 0

    etag = _text(props, DAV_NS, "getetag")
    mime_type = _text(props, DAV_NS, "getcontenttype") or (FOLDER_MIME_TYPE if is_folder else "")

    tags: list[str] | None = None
    if tags_supported:
        tags = []
        system_tags = props.get(f"{{{NC_NS}}}system-tags")
        if system_tags is not None:
            for tag in system_tags.findall("nc:system-tag", NAMESPACES):
                if tag.text and tag.text.strip():
                    tags.append(tag.text.strip())

    return RemoteFile(
        remote_path=remote_path,
        local_id=local_id,
        modified=modified,
        tags=tags,
        mime_type=mime_type,
        size=size,
        etag=etag.strip('"') if etag else None,
        remote_id=_text(props, OC_NS, "id"),
        permissions=_text(props, OC_NS, "permissions"),
        favorite=_text(props, OC_NS, "favorite") == "1",
    )


def parse_read_folder_response(
    body: bytes, dav_root_path: str, *, tags_supported: bool
) -> list[RemoteFile]:
    """Parse a PROPFIND multistatus body into RemoteFile records.

    Args:
        body: Raw response body
        dav_root_path: URL path of the user's WebDAV files root
        tags_supported: Whether the server reports nc:system-tags

    Returns:
        Records in server order; the first is the requested folder itself

    Raises:
        ParseError: If the body or any entry is malformed
    """
    files = [
        _parse_file(response, dav_root_path, tags_supported)
        for response in _parse_multistatus(body)
    ]
    logger.debug(f"Parsed {len(files)} entries below {dav_root_path}")
    return files


def parse_tags_response(body: bytes) -> list[Tag]:
    """Parse the system tags collection listing.

    The collection's own entry carries no id and is skipped.

    Raises:
        ParseError: If the body or a tag entry is malformed
    """
    tags: list[Tag] = []
    for response in _parse_multistatus(body):
        href = response.findtext("d:href", default="", namespaces=NAMESPACES).strip()
        props = _ok_props(response)
        tag_id = _text(props, OC_NS, "id")
        if not tag_id:
            continue
        tags.append(
            Tag(
                id=_to_int(tag_id, "id", href),
                name=_required(props, OC_NS, "display-name", href),
                user_visible=_text(props, OC_NS, "user-visible") != "false",
                user_assignable=_text(props, OC_NS, "user-assignable") != "false",
            )
        )
    return tags

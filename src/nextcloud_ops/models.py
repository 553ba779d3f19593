"""Data models for the nextcloud_ops library."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

_VERSION_WIDTH = 4


@dataclass(frozen=True, order=True)
class NextcloudVersion:
    """Comparable server version, e.g. ``27.1.0.7``."""

    parts: tuple[int, ...]

    def __post_init__(self) -> None:
        # "27" and "27.0.0" must compare equal
        if len(self.parts) < _VERSION_WIDTH:
            padded = self.parts + (0,) * (_VERSION_WIDTH - len(self.parts))
            object.__setattr__(self, "parts", padded)

    @classmethod
    def parse(cls, version: str) -> NextcloudVersion:
        """Parse a dotted version string.

        Raises:
            ValueError: If a component is not an integer
        """
        pieces = [p for p in version.strip().split(".") if p]
        if not pieces:
            raise ValueError(f"Invalid version: {version!r}")
        return cls(tuple(int(p) for p in pieces))

    @property
    def major(self) -> int:
        return self.parts[0]

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


NEXTCLOUD_26 = NextcloudVersion((26, 0, 0))
NEXTCLOUD_27 = NextcloudVersion((27, 0, 0))
NEXTCLOUD_28 = NextcloudVersion((28, 0, 0))


class Capability(Enum):
    """Server features gated by version."""

    TAGS = "tags"


_MINIMUM_VERSION: dict[Capability, NextcloudVersion] = {
    # nc:system-tags in PROPFIND responses
    Capability.TAGS: NEXTCLOUD_27,
}


@dataclass(frozen=True)
class ServerInfo:
    """Information reported by the server's status endpoint."""

    version: NextcloudVersion
    version_string: str = ""
    product_name: str = "Nextcloud"
    installed: bool = True
    maintenance: bool = False

    def supports(self, capability: Capability) -> bool:
        """Check whether the server is recent enough for a capability."""
        return self.version >= _MINIMUM_VERSION[capability]


@dataclass(frozen=True)
class RemoteFile:
    """A file or folder entry returned by a folder listing.

    ``tags`` is None when the server predates tag support and an empty list
    when tags are supported but none are assigned.
    """

    remote_path: str
    local_id: int
    modified: datetime
    tags: list[str] | None = None
    mime_type: str = ""
    size: int = 0
    etag: str | None = None
    remote_id: str | None = None
    permissions: str | None = None
    favorite: bool = False

    @property
    def is_folder(self) -> bool:
        return self.remote_path.endswith("/")

    @property
    def name(self) -> str:
        """Last path component, without the folder separator."""
        return self.remote_path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Tag:
    """A server-side system tag."""

    id: int
    name: str
    user_visible: bool = True
    user_assignable: bool = True


@dataclass(frozen=True)
class Task:
    """An assistant text-processing task."""

    id: int
    type: str
    status: int
    app_id: str
    input: str
    output: str | None = None
    identifier: str | None = None

"""Pytest fixtures for nextcloud_ops tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from helpers import BASE_URL, PASSWORD, USER, FakeNextcloud

from nextcloud_ops import NextcloudClient
from nextcloud_ops.models import NextcloudVersion, ServerInfo


@pytest.fixture
def fake_server() -> FakeNextcloud:
    """An empty Nextcloud 27 server."""
    return FakeNextcloud()


@pytest.fixture
def client(fake_server: FakeNextcloud) -> Iterator[NextcloudClient]:
    """A client talking to fake_server that has not discovered the server yet."""
    with NextcloudClient(BASE_URL, USER, PASSWORD, transport=fake_server.transport()) as c:
        yield c


@pytest.fixture
def tags_client(fake_server: FakeNextcloud) -> Iterator[NextcloudClient]:
    """A client that knows the server supports tags."""
    info = ServerInfo(version=NextcloudVersion.parse(fake_server.version))
    with NextcloudClient(
        BASE_URL, USER, PASSWORD, server_info=info, transport=fake_server.transport()
    ) as c:
        yield c


@pytest.fixture
def temp_text(tmp_path: Path) -> Path:
    """Create a temporary text file for uploading."""
    path = tmp_path / "text.txt"
    path.write_text("text")
    return path

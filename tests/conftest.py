"""Shared fixtures: in-memory tarballs and a fake HTTP session."""

import io
import tarfile

import pytest
import requests


def tarball_bytes(top: str, files: dict[str, str], mode: str = "w:gz") -> bytes:
    """Build a tar archive whose members all live under top/."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tar:
        info = tarfile.TarInfo(top)
        info.type = tarfile.DIRTYPE
        info.mode = 0o755
        tar.addfile(info)
        for rel, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{top}/{rel}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeResponse:
    """Stands in for a streamed requests.Response.

    ``fail_at`` raises the given exception instead of yielding that chunk.
    """

    def __init__(self, chunks, status=200, fail_at=None, exc=None):
        self.chunks = list(chunks)
        self.status_code = status
        self.fail_at = fail_at
        self.exc = exc or requests.ConnectionError("connection reset by peer")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def iter_content(self, chunk_size=1):
        for i, chunk in enumerate(self.chunks):
            if i == self.fail_at:
                raise self.exc
            yield chunk


class FakeSession:
    """Maps URL → FakeResponse (or a callable returning one) and records calls."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []

    def get(self, url, stream=False, timeout=None):
        self.calls.append(url)
        if url not in self.routes:
            raise requests.ConnectionError(f"no route to {url}")
        route = self.routes[url]
        return route() if callable(route) else route


def chunked(data: bytes, size: int = 7) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


@pytest.fixture
def make_tarball(tmp_path):
    """Write a tarball to tmp_path and return its path."""
    def make(name: str, top: str, files: dict[str, str], mode: str = "w:gz"):
        path = tmp_path / name
        path.write_bytes(tarball_bytes(top, files, mode))
        return path
    return make


@pytest.fixture
def http():
    return FakeSession()

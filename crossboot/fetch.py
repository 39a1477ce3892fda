"""Download source archives into the cache, at most once and atomically.

The destination file doubles as the "fetched" marker: if it exists it is
complete, because the only way it comes into being is a rename of a fully
written temporary file:

    <dest>.part   ← streamed body, flushed and fsync'd, digest checked
    <dest>        ← os.replace(<dest>.part, <dest>)

An interrupted or failed transfer therefore leaves at most a ``.part`` file
behind, never a truncated ``<dest>``. There is no byte-range resume: a retry
truncates the ``.part`` file and starts from zero.
"""

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import requests

from crossboot.errors import DownloadError

log = logging.getLogger(__name__)

PART_SUFFIX = ".part"
CHUNK_SIZE = 1 << 20
TIMEOUT = (15, 300)  # connect, read (seconds)


@dataclass(frozen=True)
class Artifact:
    """A remote file plus the name it is cached under.

    ``sha256`` is optional; when set, the download is rejected unless the
    hex digest of the body matches.
    """

    name: str
    url: str
    sha256: str | None = None

    def path(self, cache_dir: str | Path) -> Path:
        return Path(cache_dir) / self.name


def part_path(dest: str | Path) -> Path:
    dest = Path(dest)
    return dest.with_name(dest.name + PART_SUFFIX)


def fetch(url: str, dest: str | Path, *, sha256: str | None = None,
          session: requests.Session | None = None,
          chunk_size: int = CHUNK_SIZE, timeout=TIMEOUT) -> Path:
    """Download url to dest unless dest already exists. Returns dest.

    Raises DownloadError on connection errors, non-2xx responses and digest
    mismatches. On any failure dest is left absent.
    """
    dest = Path(dest)
    if dest.exists():
        log.debug("already fetched: %s", dest)
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = part_path(dest)
    http = session or requests

    log.info("fetching %s", url)
    digest = hashlib.sha256()
    size = 0
    try:
        with http.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with open(tmp, "wb") as f:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    digest.update(chunk)
                    size += len(chunk)
                f.flush()
                os.fsync(f.fileno())
    except requests.RequestException as e:
        raise DownloadError(f"{url}: {e}") from e
    except OSError as e:
        raise DownloadError(f"{url}: writing {tmp}: {e}") from e

    if sha256 is not None and digest.hexdigest() != sha256.lower():
        tmp.unlink(missing_ok=True)
        raise DownloadError(
            f"{url}: sha256 mismatch (expected {sha256}, got {digest.hexdigest()})"
        )

    os.replace(tmp, dest)
    log.debug("fetched %s (%d bytes)", dest, size)
    return dest


def fetch_artifact(artifact: Artifact, cache_dir: str | Path, *,
                   session: requests.Session | None = None) -> Path:
    """Fetch an Artifact into cache_dir / artifact.name."""
    return fetch(artifact.url, artifact.path(cache_dir),
                 sha256=artifact.sha256, session=session)

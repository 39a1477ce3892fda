"""Unpack a source tarball under a canonical, version-free directory name.

Upstream archives unpack to versioned names (``gcc-14.3.0/``), but later
build steps want a stable path (``src/gcc``). extract_to() bridges the two:

    1. read the manifest → top-level name ("gcc-14.3.0")
    2. extract into <parent>/.extract-gcc/gcc-14.3.0
    3. remove <parent>/gcc, if present
    4. rename .extract-gcc/gcc-14.3.0 → <parent>/gcc

The old tree is purged only after step 2 has fully succeeded, and always
before step 4, so old and new contents are never merged. If the process
dies between 3 and 4 the canonical directory is simply missing; the next
build step that needs it fails loudly instead of compiling stale sources.
"""

import logging
import os
import shutil
import tarfile
from pathlib import Path, PurePosixPath

from crossboot.errors import ExtractionError

log = logging.getLogger(__name__)

STAGING_PREFIX = ".extract-"


def _first_segment(member_name: str) -> str:
    parts = [p for p in PurePosixPath(member_name).parts if p not in ("", ".", "/")]
    return parts[0] if parts else ""


def top_level_dir(archive: str | Path) -> str:
    """Name of the single top-level directory the archive unpacks to.

    Taken from the first listed member. Every other member must live under
    the same name, otherwise the archive cannot be mapped onto a single
    canonical directory.
    """
    try:
        with tarfile.open(archive, "r:*") as tar:
            names = tar.getnames()
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"cannot read {archive}: {e}") from e

    if not names:
        raise ExtractionError(f"{archive}: empty archive")

    top = _first_segment(names[0])
    if not top:
        raise ExtractionError(f"{archive}: first member {names[0]!r} has no directory")
    for name in names[1:]:
        seg = _first_segment(name)
        if seg and seg != top:
            raise ExtractionError(
                f"{archive}: expected a single top-level directory {top!r}, "
                f"found {seg!r}"
            )
    return top


def _remove_tree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def extract_to(archive: str | Path, canonical_dir: str | Path) -> Path:
    """Extract archive so that canonical_dir holds exactly its payload.

    Returns canonical_dir. Raises ExtractionError if the archive cannot be
    read or unpacked; in that case any previous canonical_dir is untouched.
    """
    canonical_dir = Path(canonical_dir)
    top = top_level_dir(archive)

    parent = canonical_dir.parent
    parent.mkdir(parents=True, exist_ok=True)
    staging = parent / f"{STAGING_PREFIX}{canonical_dir.name}"
    _remove_tree(staging)
    staging.mkdir()

    log.info("extracting %s → %s", archive, canonical_dir)
    try:
        with tarfile.open(archive, "r:*") as tar:
            tar.extractall(staging, filter="data")
    except (tarfile.TarError, OSError) as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise ExtractionError(f"cannot extract {archive}: {e}") from e

    unpacked = staging / top
    if not unpacked.is_dir():
        shutil.rmtree(staging, ignore_errors=True)
        raise ExtractionError(f"{archive}: {top!r} is not a directory")

    try:
        _remove_tree(canonical_dir)
        os.rename(unpacked, canonical_dir)
    except OSError as e:
        raise ExtractionError(f"cannot move {unpacked} to {canonical_dir}: {e}") from e
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    return canonical_dir

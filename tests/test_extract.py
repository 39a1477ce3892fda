"""Tests for canonical-directory extraction."""

import io
import tarfile

import pytest

from crossboot.errors import ExtractionError
from crossboot.extract import STAGING_PREFIX, extract_to, top_level_dir


def test_top_level_dir(make_tarball):
    archive = make_tarball("foo-1.0.tar.gz", "foo-1.0", {"README": "hi"})
    assert top_level_dir(archive) == "foo-1.0"


@pytest.mark.parametrize("mode,suffix", [
    ("w:gz", "tar.gz"),
    ("w:bz2", "tar.bz2"),
    ("w:xz", "tar.xz"),
    ("w", "tar"),
])
def test_compressions(make_tarball, tmp_path, mode, suffix):
    archive = make_tarball(f"foo.{suffix}", "foo-1.0", {"a.c": "int a;"}, mode=mode)
    out = extract_to(archive, tmp_path / "src" / "foo")
    assert (out / "a.c").read_text() == "int a;"


def test_extract_renames_to_canonical(make_tarball, tmp_path):
    archive = make_tarball("foo-1.0.tar.gz", "foo-1.0", {
        "configure": "#!/bin/sh\n",
        "lib/foo.c": "int foo(void);",
    })
    canonical = tmp_path / "src" / "foo"

    assert extract_to(archive, canonical) == canonical

    assert (canonical / "configure").is_file()
    assert (canonical / "lib" / "foo.c").read_text() == "int foo(void);"
    assert sorted(p.name for p in (tmp_path / "src").iterdir()) == ["foo"]


def test_second_version_replaces_first(make_tarball, tmp_path):
    """foo-1.0 then foo-2.0 into "foo": only foo-2.0's payload remains."""
    v1 = make_tarball("foo-1.0.tar.gz", "foo-1.0", {"old.c": "1", "shared.h": "v1"})
    v2 = make_tarball("foo-2.0.tar.gz", "foo-2.0", {"new.c": "2", "shared.h": "v2"})
    canonical = tmp_path / "src" / "foo"

    extract_to(v1, canonical)
    extract_to(v2, canonical)

    assert sorted(p.name for p in canonical.iterdir()) == ["new.c", "shared.h"]
    assert (canonical / "shared.h").read_text() == "v2"
    assert sorted(p.name for p in (tmp_path / "src").iterdir()) == ["foo"]


def test_no_staging_directory_left_behind(make_tarball, tmp_path):
    archive = make_tarball("foo.tar.gz", "foo-1.0", {"x": "y"})
    extract_to(archive, tmp_path / "src" / "foo")
    assert not (tmp_path / "src" / f"{STAGING_PREFIX}foo").exists()


def test_unreadable_archive_keeps_old_tree(make_tarball, tmp_path):
    good = make_tarball("foo-1.0.tar.gz", "foo-1.0", {"old.c": "1"})
    canonical = tmp_path / "src" / "foo"
    extract_to(good, canonical)

    bad = tmp_path / "broken.tar.gz"
    bad.write_bytes(b"this is not a tarball")

    with pytest.raises(ExtractionError):
        extract_to(bad, canonical)
    assert (canonical / "old.c").read_text() == "1"


def test_missing_archive(tmp_path):
    with pytest.raises(ExtractionError):
        extract_to(tmp_path / "nope.tar.gz", tmp_path / "src" / "nope")


def test_empty_archive(tmp_path):
    path = tmp_path / "empty.tar"
    with tarfile.open(path, "w"):
        pass
    with pytest.raises(ExtractionError, match="empty"):
        top_level_dir(path)


def test_multiple_top_level_entries(tmp_path):
    path = tmp_path / "two.tar"
    with tarfile.open(path, "w") as tar:
        for name in ("a/file", "b/file"):
            info = tarfile.TarInfo(name)
            info.size = 1
            tar.addfile(info, io.BytesIO(b"x"))
    with pytest.raises(ExtractionError, match="single top-level"):
        top_level_dir(path)


def test_top_level_must_be_directory(tmp_path):
    path = tmp_path / "flat.tar"
    with tarfile.open(path, "w") as tar:
        info = tarfile.TarInfo("README")
        info.size = 2
        tar.addfile(info, io.BytesIO(b"hi"))
    with pytest.raises(ExtractionError, match="not a directory"):
        extract_to(path, tmp_path / "src" / "flat")
    assert not (tmp_path / "src" / "flat").exists()

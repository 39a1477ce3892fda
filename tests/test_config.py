"""Tests for layered build configuration."""

import pytest

from crossboot.config import BuildConfig, kernel_arch, load_config
from crossboot.errors import ConfigError


def test_defaults(tmp_path):
    cfg = BuildConfig(root=tmp_path, jobs=2)
    assert cfg.root == tmp_path.resolve()
    assert cfg.prefix == cfg.root / "toolchain"
    assert cfg.target == "aarch64-linux-musl"
    assert cfg.arch == "arm64"
    assert cfg.cache_dir == cfg.root / "cache"
    assert cfg.src_dir == cfg.root / "src"
    assert cfg.build_dir == cfg.root / "build"
    assert cfg.marker_dir == cfg.root / "markers"
    assert cfg.source("gcc") == cfg.root / "src" / "gcc"
    assert cfg.build("gcc-stage1") == cfg.root / "build" / "gcc-stage1"
    assert cfg.sysroot == cfg.prefix / "aarch64-linux-musl"


def test_explicit_prefix(tmp_path):
    cfg = BuildConfig(root=tmp_path, prefix=tmp_path / "opt" / "cross")
    assert cfg.prefix == (tmp_path / "opt" / "cross").resolve()


@pytest.mark.parametrize("target,arch", [
    ("x86_64-linux-musl", "x86"),
    ("riscv64-linux-gnu", "riscv"),
    ("armv6-linux-musleabihf", "arm"),
    ("aarch64-unknown-linux-gnu", "arm64"),
])
def test_kernel_arch(target, arch):
    assert kernel_arch(target) == arch


def test_unknown_arch():
    with pytest.raises(ConfigError, match="kernel ARCH"):
        kernel_arch("vax-linux-gnu")


def test_unknown_arch_can_be_given(tmp_path):
    assert BuildConfig(root=tmp_path, target="vax-linux-gnu", arch="vax").arch == "vax"


@pytest.mark.parametrize("kw", [{"jobs": 0}, {"target": "aarch64"}])
def test_invalid_values(tmp_path, kw):
    with pytest.raises(ConfigError):
        BuildConfig(root=tmp_path, **kw)


class TestLoadConfig:

    def test_file(self, tmp_path):
        path = tmp_path / "crossboot.toml"
        path.write_text(f'root = "{tmp_path}"\ntarget = "riscv64-linux-musl"\njobs = 3\n')
        cfg = load_config(path, environ={})
        assert cfg.root == tmp_path.resolve()
        assert cfg.target == "riscv64-linux-musl"
        assert cfg.arch == "riscv"
        assert cfg.jobs == 3

    def test_env_beats_file(self, tmp_path):
        path = tmp_path / "crossboot.toml"
        path.write_text("jobs = 3\n")
        cfg = load_config(path, environ={"CROSSBOOT_JOBS": "5", "CROSSBOOT_ROOT": str(tmp_path)})
        assert cfg.jobs == 5
        assert cfg.root == tmp_path.resolve()

    def test_overrides_beat_env(self, tmp_path):
        cfg = load_config(environ={"CROSSBOOT_JOBS": "5"}, root=tmp_path, jobs=7, target=None)
        assert cfg.jobs == 7
        assert cfg.target == "aarch64-linux-musl"

    def test_prefix_follows_overridden_root(self, tmp_path):
        cfg = load_config(environ={}, root=tmp_path / "work")
        assert cfg.prefix == (tmp_path / "work" / "toolchain").resolve()

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "crossboot.toml"
        path.write_text('compiler = "clang"\n')
        with pytest.raises(ConfigError, match="unknown config keys"):
            load_config(path, environ={})

    def test_bad_toml(self, tmp_path):
        path = tmp_path / "crossboot.toml"
        path.write_text("jobs = = 3\n")
        with pytest.raises(ConfigError, match="invalid config"):
            load_config(path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "nope.toml", environ={})

    def test_bad_jobs(self):
        with pytest.raises(ConfigError, match="jobs"):
            load_config(environ={"CROSSBOOT_JOBS": "many"})

"""Build configuration: where things live and what to build for.

Values are layered, later ones winning:

    1. defaults (below)
    2. an optional TOML file          root = "/work", target = "riscv64-linux-musl"
    3. CROSSBOOT_* environment vars   CROSSBOOT_JOBS=8
    4. explicit overrides (CLI flags)

Everything under ``root`` is derived: cache/, src/, build/, markers/, and
the default install prefix toolchain/.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

from crossboot.errors import ConfigError

DEFAULT_TARGET = "aarch64-linux-musl"

ENV_VARS = {
    "root": "CROSSBOOT_ROOT",
    "prefix": "CROSSBOOT_PREFIX",
    "target": "CROSSBOOT_TARGET",
    "jobs": "CROSSBOOT_JOBS",
}

# Linux kernel ARCH= value for the first component of a target triple.
KERNEL_ARCH = {
    "aarch64": "arm64",
    "arm": "arm",
    "armv7": "arm",
    "i686": "x86",
    "x86_64": "x86",
    "riscv64": "riscv",
    "mips": "mips",
    "mipsel": "mips",
    "powerpc": "powerpc",
    "powerpc64": "powerpc",
    "s390x": "s390",
}


def kernel_arch(target: str) -> str:
    cpu = target.split("-", 1)[0]
    if cpu in KERNEL_ARCH:
        return KERNEL_ARCH[cpu]
    if cpu.startswith("arm"):
        return "arm"
    raise ConfigError(f"cannot derive kernel ARCH for target {target!r}; set 'arch'")


@dataclass(frozen=True)
class BuildConfig:
    root: Path = Path(".")
    prefix: Path | None = None
    target: str = DEFAULT_TARGET
    arch: str | None = None
    jobs: int = field(default_factory=lambda: os.cpu_count() or 1)

    def __post_init__(self):
        if self.target.count("-") < 1:
            raise ConfigError(f"target must be a triple like {DEFAULT_TARGET!r}, got {self.target!r}")
        object.__setattr__(self, "root", Path(self.root).resolve())
        if self.prefix is None:
            object.__setattr__(self, "prefix", self.root / "toolchain")
        else:
            object.__setattr__(self, "prefix", Path(self.prefix).resolve())
        if self.arch is None:
            object.__setattr__(self, "arch", kernel_arch(self.target))
        if not isinstance(self.jobs, int) or self.jobs < 1:
            raise ConfigError(f"jobs must be a positive integer, got {self.jobs!r}")

    @property
    def cache_dir(self) -> Path:
        return self.root / "cache"

    @property
    def src_dir(self) -> Path:
        return self.root / "src"

    @property
    def build_dir(self) -> Path:
        return self.root / "build"

    @property
    def marker_dir(self) -> Path:
        return self.root / "markers"

    def source(self, component: str) -> Path:
        return self.src_dir / component

    def build(self, component: str) -> Path:
        return self.build_dir / component

    @property
    def sysroot(self) -> Path:
        """Where target headers and the C library are installed."""
        return self.prefix / self.target


def _coerce(name: str, value):
    if name == "jobs":
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"jobs must be an integer, got {value!r}") from None
    if name in ("root", "prefix"):
        return Path(value).expanduser()
    return str(value)


def load_config(path: str | Path | None = None, *, environ=None, **overrides) -> BuildConfig:
    """Assemble a BuildConfig from file, environment and overrides.

    Overrides whose value is None are ignored, so argparse results can be
    passed straight through.
    """
    known = {f.name for f in fields(BuildConfig)}
    values: dict = {}

    if path is not None:
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid config {path}: {e}") from e
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown config keys in {path}: {', '.join(sorted(unknown))}")
        values.update({k: _coerce(k, v) for k, v in data.items()})

    env = os.environ if environ is None else environ
    for name, var in ENV_VARS.items():
        if env.get(var):
            values[name] = _coerce(name, env[var])

    for name, value in overrides.items():
        if name not in known:
            raise ConfigError(f"unknown config option: {name}")
        if value is not None:
            values[name] = _coerce(name, value)

    return BuildConfig(**values)

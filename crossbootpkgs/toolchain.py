"""The cross toolchain bootstrap chain.

    fetch-*            all source archives, before any build
      ↓
    binutils           cross as/ld                       → prefix/bin
    linux-headers      target kernel headers             → sysroot/usr/include
    gcc-stage1         C-only compiler, no libc needed   → prefix/bin
    musl               target C library (uses stage 1)   → sysroot/usr/lib
    gcc-final          full compiler (uses headers+libc) → prefix/bin

Each edge is written down in ``requires`` rather than implied by position,
so "headers before library before final compiler" is checked by
Pipeline.order() instead of relied upon.
"""

import requests

from crossboot.config import BuildConfig
from crossboot.fetch import Artifact, fetch_artifact
from crossboot.pipeline import Pipeline, Step
from crossboot.runner import StepContext
from crossbootpkgs.pkgs.binutils import make_binutils
from crossbootpkgs.pkgs.gcc import make_gcc_final, make_gcc_stage1
from crossbootpkgs.pkgs.linux_headers import make_linux_headers
from crossbootpkgs.pkgs.musl import make_musl
from crossbootpkgs.sources import SOURCES


def fetch_step_name(component: str) -> str:
    return f"fetch-{component}"


def make_fetch(config: BuildConfig, artifact: Artifact,
               session: requests.Session | None = None):
    def fetch(ctx: StepContext) -> None:
        fetch_artifact(artifact, config.cache_dir, session=session)

    return fetch


def toolchain_pipeline(config: BuildConfig, *,
                       session: requests.Session | None = None) -> Pipeline:
    pipe = Pipeline()

    fetches = []
    for component, source in SOURCES.items():
        artifact = source()
        name = fetch_step_name(component)
        pipe.add(Step(name, make_fetch(config, artifact, session),
                      description=f"download {artifact.name}"))
        fetches.append(name)

    def needs(*components: str) -> tuple[str, ...]:
        return tuple(fetches) + components

    pipe.add(Step("binutils", make_binutils(config), needs(),
                  "cross assembler and linker"))
    pipe.add(Step("linux-headers", make_linux_headers(config), needs(),
                  "target kernel headers into the sysroot"))
    pipe.add(Step("gcc-stage1", make_gcc_stage1(config),
                  needs("binutils", "linux-headers"),
                  "standalone C compiler"))
    pipe.add(Step("musl", make_musl(config),
                  needs("gcc-stage1", "linux-headers"),
                  "target C library"))
    pipe.add(Step("gcc-final", make_gcc_final(config),
                  needs("binutils", "musl"),
                  "final C/C++ compiler"))
    return pipe

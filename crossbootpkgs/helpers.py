"""Shared helpers for the component recipes.

  - unpack(): extract a cached archive into src/<component>
  - enter_build_dir(): fresh out-of-source build directory
  - use_toolchain(): put the freshly installed cross tools on PATH
  - make(): ``make -jN`` in the step's working directory
"""

import shutil
from pathlib import Path

from crossboot.config import BuildConfig
from crossboot.extract import extract_to
from crossboot.fetch import Artifact
from crossboot.runner import StepContext


def unpack(config: BuildConfig, component: str, artifact: Artifact,
           dest: Path | None = None) -> Path:
    """Extract artifact from the cache into its canonical source directory."""
    return extract_to(artifact.path(config.cache_dir), dest or config.source(component))


def enter_build_dir(ctx: StepContext, config: BuildConfig, name: str) -> Path:
    """Recreate build/<name> and make it the step's working directory.

    Builds always start from an empty directory so a re-run after a
    failure never picks up a half-configured tree.
    """
    build = config.build(name)
    if build.exists():
        shutil.rmtree(build)
    build.mkdir(parents=True)
    return ctx.chdir(build)


def use_toolchain(ctx: StepContext, config: BuildConfig) -> None:
    path = ctx.env.get("PATH", "")
    bindir = str(config.prefix / "bin")
    ctx.export("PATH", f"{bindir}:{path}" if path else bindir)


def make(ctx: StepContext, config: BuildConfig, *targets: str, **variables: str) -> None:
    argv = ["make", f"-j{config.jobs}", *targets]
    argv += [f"{k}={v}" for k, v in variables.items()]
    ctx.run(argv)

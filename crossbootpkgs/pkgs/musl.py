"""musl — the target C library, compiled with the stage 1 gcc.

Installed into the sysroot with ``--prefix=/usr`` + ``DESTDIR`` so that
paths baked into the library are target paths, not build-host paths.
"""

from crossboot.config import BuildConfig
from crossboot.runner import StepContext
from crossbootpkgs.helpers import enter_build_dir, make, unpack, use_toolchain
from crossbootpkgs.sources import musl_src


def configure_flags(config: BuildConfig) -> list[str]:
    return [
        f"--target={config.target}",
        "--prefix=/usr",
        "--syslibdir=/lib",
        f"CROSS_COMPILE={config.target}-",
        f"CC={config.target}-gcc",
    ]


def make_musl(config: BuildConfig):
    def build(ctx: StepContext) -> None:
        src = unpack(config, "musl", musl_src())
        use_toolchain(ctx, config)
        enter_build_dir(ctx, config, "musl")
        ctx.run([src / "configure", *configure_flags(config)])
        make(ctx, config)
        make(ctx, config, "install", DESTDIR=str(config.sysroot))

    return build

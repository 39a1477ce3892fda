"""binutils — cross assembler and linker.

First build of the chain: needs nothing from the install prefix, and
everything after it needs ``<target>-as`` / ``<target>-ld``. Installed with
``--with-sysroot`` pointing at ``<prefix>/<target>`` so the linker later
finds the C library there.
"""

from crossboot.config import BuildConfig
from crossboot.runner import StepContext
from crossbootpkgs.helpers import enter_build_dir, make, unpack
from crossbootpkgs.sources import binutils_src


def configure_flags(config: BuildConfig) -> list[str]:
    return [
        f"--target={config.target}",
        f"--prefix={config.prefix}",
        f"--with-sysroot={config.sysroot}",
        "--disable-nls",
        "--disable-werror",
        "--disable-multilib",
    ]


def make_binutils(config: BuildConfig):
    """Step body building and installing binutils."""

    def build(ctx: StepContext) -> None:
        src = unpack(config, "binutils", binutils_src())
        enter_build_dir(ctx, config, "binutils")
        ctx.run([src / "configure", *configure_flags(config)])
        make(ctx, config)
        make(ctx, config, "install")

    return build

"""Linux UAPI headers for the target, installed into the sysroot.

``make headers_install`` only needs a host compiler, so this can run
before any cross compiler exists. The C library build includes these
(``<linux/...>``, ``<asm/...>``) from ``<sysroot>/usr/include``.
"""

from crossboot.config import BuildConfig
from crossboot.runner import StepContext
from crossbootpkgs.helpers import enter_build_dir, make, unpack
from crossbootpkgs.sources import linux_src


def make_linux_headers(config: BuildConfig):
    def build(ctx: StepContext) -> None:
        src = unpack(config, "linux", linux_src())
        build_dir = enter_build_dir(ctx, config, "linux-headers")
        # kbuild runs from the source tree and writes to O=
        ctx.chdir(src)
        make(
            ctx, config, "headers_install",
            ARCH=config.arch,
            INSTALL_HDR_PATH=str(config.sysroot / "usr"),
            O=str(build_dir),
        )

    return build

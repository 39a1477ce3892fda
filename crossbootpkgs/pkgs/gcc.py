"""gcc — built twice.

Stage 1 ("standalone"): C only, no shared libgcc, no threads, no libc
headers. Just enough compiler to build the C library, which is the whole
point: the C library cannot be compiled without a compiler, and a full
compiler cannot be built without the C library.

    make all-gcc all-target-libgcc
    make install-gcc install-target-libgcc

Final: C and C++, shared libgcc, linked against the C library now sitting
in the sysroot.

Both builds unpack gcc afresh and drop gmp/mpfr/mpc into the gcc source
tree, where gcc's top-level configure builds them in-tree.
"""

from crossboot.config import BuildConfig
from crossboot.runner import StepContext
from crossbootpkgs.helpers import enter_build_dir, make, unpack, use_toolchain
from crossbootpkgs.sources import gcc_src, gmp_src, mpc_src, mpfr_src

IN_TREE_LIBS = {
    "gmp": gmp_src,
    "mpfr": mpfr_src,
    "mpc": mpc_src,
}


def unpack_gcc(config: BuildConfig):
    src = unpack(config, "gcc", gcc_src())
    for name, source in IN_TREE_LIBS.items():
        unpack(config, name, source(), dest=src / name)
    return src


def common_flags(config: BuildConfig) -> list[str]:
    return [
        f"--target={config.target}",
        f"--prefix={config.prefix}",
        f"--with-sysroot={config.sysroot}",
        "--disable-nls",
        "--disable-multilib",
        "--disable-libsanitizer",
    ]


def stage1_flags(config: BuildConfig) -> list[str]:
    return common_flags(config) + [
        "--enable-languages=c",
        "--with-newlib",
        "--without-headers",
        "--disable-shared",
        "--disable-threads",
        "--disable-libatomic",
        "--disable-libgomp",
        "--disable-libquadmath",
        "--disable-libssp",
        "--disable-libstdcxx",
    ]


def final_flags(config: BuildConfig) -> list[str]:
    return common_flags(config) + [
        "--enable-languages=c,c++",
        "--enable-shared",
        "--enable-threads=posix",
    ]


def make_gcc_stage1(config: BuildConfig):
    def build(ctx: StepContext) -> None:
        src = unpack_gcc(config)
        use_toolchain(ctx, config)
        enter_build_dir(ctx, config, "gcc-stage1")
        ctx.run([src / "configure", *stage1_flags(config)])
        make(ctx, config, "all-gcc", "all-target-libgcc")
        make(ctx, config, "install-gcc", "install-target-libgcc")

    return build


def make_gcc_final(config: BuildConfig):
    def build(ctx: StepContext) -> None:
        src = unpack_gcc(config)
        use_toolchain(ctx, config)
        enter_build_dir(ctx, config, "gcc-final")
        ctx.run([src / "configure", *final_flags(config)])
        make(ctx, config)
        make(ctx, config, "install")

    return build

"""Source tarballs for the cross toolchain.

One function per upstream archive. The cache file name is the upstream
file name, so a version bump lands in a fresh cache entry instead of
reusing the old download.

Digests are pinned where known; the others are fetched unverified.
"""

from crossboot.fetch import Artifact

GNU_MIRROR = "https://ftpmirror.gnu.org"

BINUTILS_VERSION = "2.42"
LINUX_VERSION = "6.6.58"
GCC_VERSION = "14.3.0"
GMP_VERSION = "6.3.0"
MPFR_VERSION = "4.2.2"
MPC_VERSION = "1.3.1"
MUSL_VERSION = "1.2.5"


def binutils_src() -> Artifact:
    return Artifact(
        f"binutils-{BINUTILS_VERSION}.tar.xz",
        f"{GNU_MIRROR}/binutils/binutils-{BINUTILS_VERSION}.tar.xz",
    )


def linux_src() -> Artifact:
    major = LINUX_VERSION.split(".", 1)[0]
    return Artifact(
        f"linux-{LINUX_VERSION}.tar.xz",
        f"https://cdn.kernel.org/pub/linux/kernel/v{major}.x/linux-{LINUX_VERSION}.tar.xz",
    )


def gcc_src() -> Artifact:
    return Artifact(
        f"gcc-{GCC_VERSION}.tar.xz",
        f"{GNU_MIRROR}/gcc/gcc-{GCC_VERSION}/gcc-{GCC_VERSION}.tar.xz",
        "e0dc77297625631ac8e50fa92fffefe899a4eb702592da5c32ef04e2293aca3a",
    )


def gmp_src() -> Artifact:
    return Artifact(
        f"gmp-{GMP_VERSION}.tar.bz2",
        f"{GNU_MIRROR}/gmp/gmp-{GMP_VERSION}.tar.bz2",
        "ac28211a7cfb609bae2e2c8d6058d66c8fe96434f740cf6fe2e47b000d1c20cb",
    )


def mpfr_src() -> Artifact:
    return Artifact(
        f"mpfr-{MPFR_VERSION}.tar.xz",
        f"https://www.mpfr.org/mpfr-{MPFR_VERSION}/mpfr-{MPFR_VERSION}.tar.xz",
        "b67ba0383ef7e8a8563734e2e889ef5ec3c3b898a01d00fa0a6869ad81c6ce01",
    )


def mpc_src() -> Artifact:
    return Artifact(
        f"mpc-{MPC_VERSION}.tar.gz",
        f"{GNU_MIRROR}/mpc/mpc-{MPC_VERSION}.tar.gz",
        "ab642492f5cf882b74aa0cb730cd410a81edcdbec895183ce930e706c1c759b8",
    )


def musl_src() -> Artifact:
    return Artifact(
        f"musl-{MUSL_VERSION}.tar.gz",
        f"https://musl.libc.org/releases/musl-{MUSL_VERSION}.tar.gz",
    )


# component name → source, in download order
SOURCES = {
    "binutils": binutils_src,
    "linux": linux_src,
    "gcc": gcc_src,
    "gmp": gmp_src,
    "mpfr": mpfr_src,
    "mpc": mpc_src,
    "musl": musl_src,
}

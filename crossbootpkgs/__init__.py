"""crossbootpkgs — the cross toolchain recipes.

Sources live in ``crossbootpkgs.sources``, one build recipe per component
in ``crossbootpkgs.pkgs.*``, and ``crossbootpkgs.toolchain`` wires them into
the bootstrap pipeline.
"""

from crossbootpkgs.toolchain import toolchain_pipeline

__all__ = ["toolchain_pipeline"]

#!/usr/bin/env python3
"""crossboot — resumable cross-toolchain bootstrap."""

import argparse
import logging
import sys

from crossboot.config import load_config
from crossboot.errors import CrossbootError, PipelineError, StepFailure
from crossboot.extract import extract_to
from crossboot.fetch import fetch
from crossboot.log import setup_logging
from crossboot.markers import MarkerStore
from crossboot.runner import StepRunner
from crossbootpkgs.toolchain import toolchain_pipeline

log = logging.getLogger("crossboot")


def _config(args):
    return load_config(
        args.config,
        root=args.root, prefix=args.prefix, target=args.target, jobs=args.jobs,
    )


def cmd_run(args):
    config = _config(args)
    pipeline = toolchain_pipeline(config)
    runner = StepRunner(MarkerStore(config.marker_dir))
    log.info("bootstrapping %s into %s", config.target, config.prefix)
    try:
        pipeline.run_all(runner)
    except StepFailure as e:
        log.error("pipeline stopped at step %r; fix the problem and re-run to resume", e.step)
        raise


def cmd_status(args):
    config = _config(args)
    pipeline = toolchain_pipeline(config)
    markers = MarkerStore(config.marker_dir)
    width = max(len(s.name) for s in pipeline)
    for step in pipeline.order():
        marker = markers.get(step.name)
        if marker is None:
            print(f"  pending  {step.name}")
        else:
            print(f"  done     {step.name:<{width}}  {marker.completed_at}  ({marker.duration:.0f}s)")


def cmd_forget(args):
    config = _config(args)
    pipeline = toolchain_pipeline(config)
    if args.step not in pipeline:
        raise PipelineError(f"no such step: {args.step!r}")
    names = [args.step]
    if args.with_dependents:
        names += pipeline.dependents(args.step)
    markers = MarkerStore(config.marker_dir)
    for name in names:
        if markers.forget(name):
            print(f"forgot {name}")


def cmd_fetch(args):
    path = fetch(args.url, args.dest, sha256=args.sha256)
    print(path)


def cmd_extract(args):
    path = extract_to(args.archive, args.dir)
    print(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crossboot", description="Resumable cross-toolchain bootstrap")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--config", help="TOML configuration file")
    parser.add_argument("--root", help="Work directory (cache, sources, builds, markers)")
    parser.add_argument("--prefix", help="Install prefix for the toolchain")
    parser.add_argument("--target", help="Target triple, e.g. aarch64-linux-musl")
    parser.add_argument("--jobs", "-j", type=int, help="Parallel make jobs")
    sub = parser.add_subparsers(dest="command")

    # run
    p = sub.add_parser("run", help="Run every step, skipping completed ones")
    p.set_defaults(func=cmd_run)

    # status
    p = sub.add_parser("status", help="Show steps in execution order and whether they are done")
    p.set_defaults(func=cmd_status)

    # forget
    p = sub.add_parser("forget", help="Delete a step's completion marker")
    p.add_argument("step")
    p.add_argument("--with-dependents", action="store_true",
                   help="Also forget every step that depends on it")
    p.set_defaults(func=cmd_forget)

    # fetch
    p = sub.add_parser("fetch", help="Download a URL to a path, atomically")
    p.add_argument("url")
    p.add_argument("dest")
    p.add_argument("--sha256", help="Expected hex digest")
    p.set_defaults(func=cmd_fetch)

    # extract
    p = sub.add_parser("extract", help="Extract a tarball into a canonical directory")
    p.add_argument("archive")
    p.add_argument("dir")
    p.set_defaults(func=cmd_extract)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)
    setup_logging(args.verbose)
    try:
        args.func(args)
    except StepFailure:
        # already reported by the runner
        sys.exit(1)
    except CrossbootError as e:
        log.error("%s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        log.error("interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()

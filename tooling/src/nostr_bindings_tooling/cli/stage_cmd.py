"""`nostr-bindings <stage> ...` and `nostr-bindings stages`."""

from __future__ import annotations

import argparse
import sys

from nostr_bindings_tooling.cli.common import add_common_args, configure_logging, context_from_args
from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import PipelineError
from nostr_bindings_tooling.pipeline import Pipeline, default_pipeline


def run(ctx: BuildContext, stages: list[str], pipeline: Pipeline | None = None) -> int:
    """Run stages with their dependencies. Returns 0, or the failing stage's exit code."""
    p = pipeline or default_pipeline()
    try:
        p.run(ctx, stages)
    except PipelineError as e:
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code
    except (ValueError, OSError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    print(f"🎉 Done: {' '.join(stages)}")
    return 0


def run_stage_argv(argv: list[str] | None = None) -> None:
    """Parse argv (stage names + common flags) and run. argv defaults to sys.argv[1:]."""
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="nostr-bindings",
        description="Build, bind and package the ffi crate for one or more stages",
    )
    ap.add_argument("stages", nargs="+", help="Stage names (see: nostr-bindings stages)")
    add_common_args(ap)
    args = ap.parse_args(argv)
    configure_logging(args.verbose)
    try:
        ctx = context_from_args(args)
    except (OSError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(run(ctx, args.stages))


def format_stages(pipeline: Pipeline) -> str:
    """One line per stage: name, help, dependencies and required tools."""
    width = max(len(n) for n in pipeline.names())
    lines = []
    for stage in pipeline.stages.values():
        deps = f" [needs: {', '.join(stage.deps)}]" if stage.deps else ""
        tools = f" [tools: {', '.join(stage.tools)}]" if stage.tools else ""
        lines.append(f"  {stage.name.ljust(width)}  {stage.help}{deps}{tools}")
    return "\n".join(lines)


def run_stages_list_argv(argv: list[str] | None = None) -> None:
    """Print every stage with its help and dependencies. argv defaults to sys.argv[2:]."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    ap = argparse.ArgumentParser(
        prog="nostr-bindings stages",
        description="List the stages, their dependencies and the tools they run",
    )
    ap.parse_args(argv)
    print("Stages:")
    print(format_stages(default_pipeline()))
    sys.exit(0)

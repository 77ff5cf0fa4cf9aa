"""Fuse single-arch Apple libraries into universal (fat) libraries with lipo.

Output: target/<group>/<profile>/<lib>. Inputs are passed to lipo sorted by arch,
so the same set of inputs gives the same file regardless of the caller's order.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import CompilationFailure, MergeInputMissing
from nostr_bindings_tooling.helpers import library_file_name, rel
from nostr_bindings_tooling.targets.compile import CompiledArtifact, artifact_path
from nostr_bindings_tooling.targets.matrix import UniversalGroup, universal_group

_LIPO_FAT = re.compile(r"are:\s*(.+)$")
_LIPO_THIN = re.compile(r"is architecture:\s*(\S+)")


def universal_path(ctx: BuildContext, group: UniversalGroup, fmt: str) -> Path:
    """target/<group>/<profile>/<lib> for the fused artifact."""
    name = library_file_name(ctx.library_name, group.target.os, fmt)
    return ctx.target_dir / group.name / ctx.profile / name


def _validate_inputs(inputs: Sequence[CompiledArtifact]) -> None:
    if len(inputs) < 2:
        msg = f"Universal artifact needs at least 2 inputs, got {len(inputs)}"
        raise ValueError(msg)
    oses = {a.target.os for a in inputs}
    if len(oses) != 1:
        msg = f"Cannot fuse artifacts of different os families: {sorted(oses)}"
        raise ValueError(msg)
    formats = {a.format for a in inputs}
    if len(formats) != 1:
        msg = f"Cannot fuse artifacts of different formats: {sorted(formats)}"
        raise ValueError(msg)
    archs = [a.target.arch for a in inputs]
    if len(set(archs)) != len(archs):
        msg = f"Duplicate architectures in universal inputs: {archs}"
        raise ValueError(msg)
    missing = [a for a in inputs if not a.path.is_file()]
    if missing:
        lines = ", ".join(f"{a.target.triple} ({a.path})" for a in missing)
        msg = f"Missing universal input(s): {lines}. Build those targets first."
        raise MergeInputMissing(msg)


def combine(
    ctx: BuildContext, inputs: Sequence[CompiledArtifact], group: UniversalGroup
) -> CompiledArtifact:
    """lipo -create the inputs into the group's universal artifact."""
    _validate_inputs(inputs)
    fmt = inputs[0].format
    out = universal_path(ctx, group, fmt)
    out.parent.mkdir(parents=True, exist_ok=True)
    ordered = sorted(inputs, key=lambda a: a.target.arch)
    ctx.run_tool(
        ["lipo", "-create", "-output", str(out), *(str(a.path) for a in ordered)],
        CompilationFailure,
        f"lipo {group.name} ({fmt})",
    )
    if not out.is_file():
        msg = f"lipo reported success but {out} was not produced"
        raise CompilationFailure(msg)
    print(f"📦 {group.name}: {rel(out, ctx.project_root)}")
    return CompiledArtifact(out, group.target, fmt)


def combine_group(ctx: BuildContext, name: str) -> list[CompiledArtifact]:
    """Fuse every format of a named group (darwin-universal does .dylib and .a separately)."""
    group = universal_group(name)
    out: list[CompiledArtifact] = []
    for fmt in group.formats:
        inputs = [CompiledArtifact(artifact_path(ctx, t, fmt), t, fmt) for t in group.members]
        out.append(combine(ctx, inputs, group))
    return out


def parse_lipo_info(output: str) -> list[str]:
    """Architectures from `lipo -info` output (fat or thin)."""
    for line in output.splitlines():
        m = _LIPO_FAT.search(line)
        if m:
            return m.group(1).split()
        m = _LIPO_THIN.search(line)
        if m:
            return [m.group(1)]
    return []


def inspect_architectures(ctx: BuildContext, path: Path) -> list[str]:
    """Architectures present in a (possibly fat) library."""
    r = ctx.run_tool(
        ["lipo", "-info", str(path)],
        CompilationFailure,
        f"lipo -info {path.name}",
        capture=True,
    )
    return parse_lipo_info(r.stdout or "")

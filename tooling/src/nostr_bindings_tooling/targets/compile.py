"""Cross-compile the ffi crate for one target triple.

Android goes through cargo-ndk (which also copies the .so into jniLibs/<abi>),
Apple triples through cargo build --target, host through plain cargo build.
Artifacts land at target/<triple>/<profile>/ (target/<profile>/ for host).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import CompilationFailure
from nostr_bindings_tooling.helpers import library_file_name, rel
from nostr_bindings_tooling.targets.matrix import OS_FORMATS, Target, resolve


@dataclass(frozen=True)
class CompiledArtifact:
    """A built library file. Never mutated; later stages copy or fuse it."""

    path: Path
    target: Target
    format: str


def artifact_path(ctx: BuildContext, target: Target, fmt: str) -> Path:
    """Deterministic output path for target + build profile + format."""
    name = library_file_name(ctx.library_name, target.os, fmt)
    if target.is_host:
        return ctx.target_dir / ctx.profile / name
    return ctx.target_dir / target.triple / ctx.profile / name


def expected_artifacts(ctx: BuildContext, target: Target) -> list[CompiledArtifact]:
    """Artifacts a successful build of target leaves on disk."""
    return [
        CompiledArtifact(artifact_path(ctx, target, fmt), target, fmt)
        for fmt in OS_FORMATS[target.os]
    ]


def jni_libs_dir(ctx: BuildContext) -> Path:
    """cargo-ndk output root: ffi/kotlin/jniLibs/<abi>/lib*.so."""
    return ctx.ffi_out_dir / "kotlin" / "jniLibs"


def compile_command(ctx: BuildContext, target: Target) -> list[str]:
    """cargo invocation for target (run from the ffi crate dir)."""
    if target.os == "web":
        msg = "web builds go through wasm-pack (package.web), not the cargo driver"
        raise ValueError(msg)
    if target.os == "android":
        return [
            "cargo",
            "ndk",
            "-t",
            target.triple,
            "-o",
            str(jni_libs_dir(ctx)),
            "build",
            *ctx.cargo_profile_args(),
        ]
    if target.is_host:
        return ["cargo", "build", *ctx.cargo_profile_args()]
    return ["cargo", "build", *ctx.cargo_profile_args(), "--target", target.triple]


def compile_target(ctx: BuildContext, target: Target) -> list[CompiledArtifact]:
    """Build one triple. Raises CompilationFailure on non-zero exit or missing output."""
    print(f"🔨 Building {ctx.library_name} for {target.triple} ({ctx.profile})...")
    ctx.run_tool(
        compile_command(ctx, target),
        CompilationFailure,
        f"Build for {target.triple}",
        cwd=ctx.ffi_crate_dir,
    )
    artifacts = expected_artifacts(ctx, target)
    for a in artifacts:
        if not a.path.is_file():
            msg = f"Build for {target.triple} succeeded but {a.path} was not produced"
            raise CompilationFailure(msg)
        print(f"  ✅ {rel(a.path, ctx.project_root)}")
    return artifacts


def compile_family(ctx: BuildContext, family: str) -> list[CompiledArtifact]:
    """Build every target of a family, one after another (stable log order)."""
    out: list[CompiledArtifact] = []
    for target in resolve(family):
        out.extend(compile_target(ctx, target))
    return out

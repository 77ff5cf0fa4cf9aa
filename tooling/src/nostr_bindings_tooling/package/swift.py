"""Swift: module checks per Apple platform and the bindings-swift xcframework package.

xcframework slices (Info.plist and module.modulemap in each slice are checked in):
    ios-arm64                   aarch64-apple-ios static lib
    ios-arm64_x86_64-simulator  ios-universal-sim fat lib
    macos-arm64_x86_64          darwin-universal fat lib
"""

from __future__ import annotations

import shutil
from pathlib import Path

from nostr_bindings_tooling.bindgen import BindingSet, generate_bindings
from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import GenerationFailure, MergeInputMissing, PackagingToolFailure
from nostr_bindings_tooling.helpers import rel
from nostr_bindings_tooling.package.common import PlatformPackage
from nostr_bindings_tooling.targets.combine import universal_path
from nostr_bindings_tooling.targets.compile import CompiledArtifact, artifact_path
from nostr_bindings_tooling.targets.matrix import (
    AARCH64_DARWIN,
    AARCH64_IOS,
    Target,
    universal_group,
)

# platform -> (universal group, linked format, single-arch target bindings are generated from)
SWIFT_PLATFORMS: dict[str, tuple[str, str, Target]] = {
    "ios": ("ios-universal", "static", AARCH64_IOS),
    "darwin": ("darwin-universal", "dynamic", AARCH64_DARWIN),
}


def _static_lib(ctx: BuildContext, target: Target) -> CompiledArtifact:
    return CompiledArtifact(artifact_path(ctx, target, "static"), target, "static")


def _universal_lib(ctx: BuildContext, group_name: str, fmt: str) -> CompiledArtifact:
    group = universal_group(group_name)
    path = universal_path(ctx, group, fmt)
    if not path.is_file():
        msg = f"{path} not found; run {group_name} first"
        raise MergeInputMissing(msg)
    return CompiledArtifact(path, group.target, fmt)


def _swift_source(ctx: BuildContext, bindings: BindingSet) -> Path:
    name = ctx.layout["swift_source_name"]
    for src in bindings.sources:
        if src.name == name:
            return src
    msg = f"uniffi-bindgen did not produce {name} in {bindings.out_dir}"
    raise GenerationFailure(msg)


def swift_module(ctx: BuildContext, platform: str) -> BindingSet:
    """Generate Swift bindings into ffi/swift-<platform>, add the fat lib, compile-check with swiftc."""
    try:
        group_name, fmt, source_target = SWIFT_PLATFORMS[platform]
    except KeyError:
        msg = f"Unknown swift platform: {platform}. Use {', '.join(SWIFT_PLATFORMS)}."
        raise ValueError(msg) from None
    universal = _universal_lib(ctx, group_name, fmt)
    out_dir = ctx.ffi_out_dir / f"swift-{platform}"
    bindings = generate_bindings(ctx, _static_lib(ctx, source_target), "swift", out_dir, clean=True)
    shutil.copy2(universal.path, out_dir / universal.path.name)

    modulemap = bindings.header(".modulemap")
    if modulemap is None:
        msg = f"uniffi-bindgen did not produce a .modulemap in {out_dir}"
        raise GenerationFailure(msg)
    source = _swift_source(ctx, bindings)
    print(f"🔨 swiftc -emit-module ({platform})...")
    ctx.run_tool(
        [
            "swiftc",
            "-emit-module",
            "-module-name",
            ctx.layout["swift_module_name"],
            "-Xcc",
            f"-fmodule-map-file={modulemap.resolve()}",
            "-I",
            ".",
            "-L",
            ".",
            f"-l{ctx.library_name}",
            source.name,
        ],
        PackagingToolFailure,
        f"swiftc ({platform})",
        cwd=out_dir,
    )
    print(f"✅ {rel(out_dir, ctx.project_root)}")
    return bindings


def xcframework_slices(ctx: BuildContext) -> list[tuple[str, CompiledArtifact]]:
    """(slice dir, library) for each xcframework slice; every library must already exist."""
    device = _static_lib(ctx, AARCH64_IOS)
    if not device.path.is_file():
        msg = f"{device.path} not found; build {AARCH64_IOS.triple} first"
        raise MergeInputMissing(msg)
    return [
        ("ios-arm64", device),
        ("ios-arm64_x86_64-simulator", _universal_lib(ctx, "ios-universal-sim", "static")),
        ("macos-arm64_x86_64", _universal_lib(ctx, "darwin-universal", "static")),
    ]


def assemble_xcframework(ctx: BuildContext) -> PlatformPackage:
    """Lay out bindings-swift: Sources/<Module>/*.swift and per-slice headers + libs."""
    package_dir = ctx.crate_path("swift_package_dir")
    sources_dir = package_dir / ctx.layout["swift_sources_dir"]
    framework = ctx.layout["xcframework_name"]
    xcframework = package_dir / f"{framework}.xcframework"
    slices = xcframework_slices(ctx)

    bindings = generate_bindings(
        ctx, _static_lib(ctx, AARCH64_IOS), "swift", sources_dir, format_code=False, clean=True
    )
    source = _swift_source(ctx, bindings)
    source.rename(source.with_name(ctx.layout["swift_source_rename"]))

    c_headers = [h for h in bindings.headers if h.suffix == ".h"]
    for slice_name, lib in slices:
        slice_dir = xcframework / slice_name
        headers_dir = slice_dir / "Headers"
        headers_dir.mkdir(parents=True, exist_ok=True)
        for stale in headers_dir.glob("*.h"):
            stale.unlink()
        for h in c_headers:
            shutil.copy2(h, headers_dir / h.name)
        shutil.copy2(lib.path, slice_dir / f"{framework}.a")
        print(f"📦 {slice_name}: {lib.path.name} + {len(c_headers)} header(s)")

    for h in bindings.headers:
        h.unlink()
    print(f"✅ {rel(xcframework, ctx.project_root)}")
    return PlatformPackage("swift", xcframework)

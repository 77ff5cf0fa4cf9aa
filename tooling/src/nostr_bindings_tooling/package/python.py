"""Python wheel: host build, Python bindings + shared library in the package dir, bdist_wheel."""

from __future__ import annotations

import shutil
import sys

from nostr_bindings_tooling.bindgen import generate_bindings
from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import PackagingToolFailure
from nostr_bindings_tooling.helpers import library_file_name, rel, remove_path
from nostr_bindings_tooling.package.common import PlatformPackage
from nostr_bindings_tooling.targets.compile import CompiledArtifact, artifact_path, compile_target
from nostr_bindings_tooling.targets.matrix import host_target

# every os family's shared library, so a wheel never carries another host's leftovers
_SHARED_LIB_OS = ("linux", "darwin", "windows")


def build_wheel(ctx: BuildContext, install: bool = True) -> PlatformPackage:
    """Build the wheel for the host; optionally pip install it (--force-reinstall)."""
    package_dir = ctx.crate_path("python_package_dir")
    dist = package_dir / "dist"
    module_dir = package_dir / ctx.layout["python_module_dir"]
    remove_path(dist)

    requirements = package_dir / "requirements.txt"
    if requirements.is_file():
        ctx.run_tool(
            [sys.executable, "-m", "pip", "install", "-r", str(requirements)],
            PackagingToolFailure,
            "pip install -r requirements.txt",
        )

    host = host_target()
    compile_target(ctx, host)

    # uniffi reads metadata from the staticlib on macOS, from the cdylib elsewhere
    bindgen_fmt = "static" if host.os == "darwin" else "dynamic"
    source = CompiledArtifact(artifact_path(ctx, host, bindgen_fmt), host, bindgen_fmt)
    generate_bindings(ctx, source, "python", module_dir, format_code=False)

    for os_family in _SHARED_LIB_OS:
        remove_path(module_dir / library_file_name(ctx.library_name, os_family, "dynamic"))
    shared = artifact_path(ctx, host, "dynamic")
    shutil.copy2(shared, module_dir / shared.name)
    print(f"📦 {shared.name} -> {rel(module_dir, ctx.project_root)}")

    print("🔨 Building wheel...")
    ctx.run_tool(
        [sys.executable, "setup.py", "--verbose", "bdist_wheel"],
        PackagingToolFailure,
        "setup.py bdist_wheel",
        cwd=package_dir,
    )
    wheels = sorted(dist.glob(ctx.layout["wheel_glob"]))
    if not wheels:
        msg = f"bdist_wheel produced no {ctx.layout['wheel_glob']} in {dist}"
        raise PackagingToolFailure(msg)
    wheel = wheels[-1]
    print(f"✅ {rel(wheel, ctx.project_root)}")

    if install:
        ctx.run_tool(
            [sys.executable, "-m", "pip", "install", str(wheel), "--force-reinstall"],
            PackagingToolFailure,
            "pip install wheel",
        )
    return PlatformPackage("python", wheel)

"""Web: wasm-pack nodejs build of the js crate, then the base64 embedding transform on pkg/."""

from __future__ import annotations

import shlex

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import CompilationFailure, PackagingToolFailure
from nostr_bindings_tooling.helpers import library_file_name, rel, remove_path
from nostr_bindings_tooling.package.common import PlatformPackage
from nostr_bindings_tooling.targets.compile import CompiledArtifact
from nostr_bindings_tooling.targets.matrix import WASM32
from nostr_bindings_tooling.wasm.embed import embed_wasm

WASM_PACK_ENV = {"WASM_BINDGEN_WEAKREF": "1"}


def wasm_pack_command(ctx: BuildContext) -> list[str]:
    cmd = [
        "wasm-pack",
        "build",
        "--target",
        "nodejs",
        "--scope",
        ctx.layout["js_scope"],
        "--out-dir",
        ctx.layout["js_out_dir"],
    ]
    if not ctx.release:
        cmd.append("--dev")
    cmd += shlex.split(ctx.environ.get("WASM_PACK_ARGS", ""))
    return cmd


def build_web_module(ctx: BuildContext, strict: bool = True) -> PlatformPackage:
    """Fresh pkg/ from wasm-pack, with the wasm embedded into the loader."""
    crate = ctx.js_crate_dir
    pkg_dir = crate / ctx.layout["js_out_dir"]
    module = ctx.layout["js_module_name"]
    remove_path(pkg_dir)

    print("🔨 wasm-pack build...")
    ctx.run_tool(
        wasm_pack_command(ctx),
        PackagingToolFailure,
        "wasm-pack build",
        cwd=crate,
        env=WASM_PACK_ENV,
    )
    wasm = CompiledArtifact(pkg_dir / library_file_name(module, "web", "wasm"), WASM32, "wasm")
    if not wasm.path.is_file():
        msg = f"wasm-pack succeeded but {wasm.path} was not produced"
        raise CompilationFailure(msg)

    scripts = crate / "scripts"
    embedded = embed_wasm(
        pkg_dir,
        module,
        epilogue_js=scripts / "epilogue.js",
        epilogue_dts=scripts / "epilogue.d.ts",
        strict=strict,
    )
    print(f"📦 Embedded {wasm.path.name} -> {embedded.name}")
    print(f"✅ {rel(pkg_dir, ctx.project_root)}")
    return PlatformPackage("web", pkg_dir)

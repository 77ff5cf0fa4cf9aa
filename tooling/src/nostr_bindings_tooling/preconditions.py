"""Toolchain preconditions: SDK/NDK env dirs and tools on PATH.

Env dirs are checked by the stage that needs them and tools by the pipeline
before its first stage, every run; nothing is cached.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable, Mapping
from pathlib import Path

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import PreconditionUnsatisfied
from nostr_bindings_tooling.helpers import host_os_family
from nostr_bindings_tooling.targets.matrix import all_rustup_targets

ENV_DIR_DESCRIPTIONS: dict[str, str] = {
    "ANDROID_NDK_HOME": "NDK",
    "ANDROID_SDK_ROOT": "SDK",
}

INSTALL_HINTS: dict[str, str] = {
    "cargo": "https://rustup.rs",
    "rustup": "https://rustup.rs",
    "cargo-ndk": "cargo install cargo-ndk",
    "cbindgen": "cargo install cbindgen",
    "cargo-lipo": "cargo install cargo-lipo",
    "lipo": "xcode-select --install",
    "swiftc": "xcode-select --install",
    "wasm-pack": "cargo install wasm-pack",
}

CARGO_HELPERS = ("cargo-ndk", "cbindgen")


def require_env_dir(
    name: str,
    environ: Mapping[str, str] | None = None,
    description: str | None = None,
) -> Path:
    """Return $name as a Path; raise PreconditionUnsatisfied unless it is an existing directory."""
    env = os.environ if environ is None else environ
    value = env.get(name, "")
    if not value or not Path(value).is_dir():
        desc = description or ENV_DIR_DESCRIPTIONS.get(name, name)
        msg = f"Please, set the {name} env variable to point to your {desc} folder"
        raise PreconditionUnsatisfied(msg)
    return Path(value)


def require_tools(names: Iterable[str]) -> None:
    """Every tool must be on PATH; the error lists each missing one with its install hint."""
    missing = [n for n in names if not shutil.which(n)]
    if not missing:
        return
    lines = []
    for n in missing:
        hint = INSTALL_HINTS.get(n)
        lines.append(f"  {n}: NOT FOUND" + (f" (install: {hint})" if hint else ""))
    msg = "Required tools missing:\n" + "\n".join(lines)
    raise PreconditionUnsatisfied(msg)


def install_toolchain(ctx: BuildContext) -> None:
    """rustup target add for the whole matrix, then the cargo helpers (cargo-lipo on macOS)."""
    require_tools(["rustup", "cargo"])
    print("🔨 Adding rustup targets...")
    ctx.run_tool(
        ["rustup", "target", "add", *all_rustup_targets()],
        PreconditionUnsatisfied,
        "rustup target add",
    )
    helpers = list(CARGO_HELPERS)
    if host_os_family() == "darwin":
        helpers.insert(0, "cargo-lipo")
    for helper in helpers:
        print(f"📦 cargo install {helper}")
        ctx.run_tool(
            ["cargo", "install", helper],
            PreconditionUnsatisfied,
            f"cargo install {helper}",
        )
    print("✅ Toolchain ready")

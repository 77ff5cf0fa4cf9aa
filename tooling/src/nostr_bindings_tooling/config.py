"""Layout configuration and the BuildContext threaded through every stage.

Layout keys are paths relative to project_root (crate-relative where noted) and
names of the produced libraries/modules. Override any of them in
nostr-bindings.yaml at the project root:

    library_name: nostr_sdk_ffi
    ffi_crate_dir: bindings/nostr-sdk-ffi
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from nostr_bindings_tooling.errors import PipelineError
from nostr_bindings_tooling.tools import ToolRunner, run_tool

CONFIG_FILE_NAME = "nostr-bindings.yaml"

# rust-nostr defaults; override for other uniffi crates.
DEFAULT_LAYOUT: dict[str, str] = {
    "target_dir": "target",
    "ffi_crate_dir": "bindings/nostr-ffi",
    "js_crate_dir": "bindings/nostr-js",
    "library_name": "nostr_ffi",
    "bindgen_package": "uniffi-bindgen",
    # crate-relative (ffi crate)
    "ffi_out_dir": "ffi",
    "android_project_dir": "bindings-android",
    "swift_package_dir": "bindings-swift",
    "python_package_dir": "bindings-python",
    # swift package
    "swift_sources_dir": "Sources/Nostr",
    "swift_source_name": "nostr.swift",
    "swift_source_rename": "Nostr.swift",
    "swift_module_name": "nostr_ffi",
    "xcframework_name": "nostrFFI",
    # python package (relative to python_package_dir)
    "python_module_dir": "src/nostr",
    "wheel_glob": "nostr_protocol*.whl",
    # web (js crate)
    "js_module_name": "nostr_js",
    "js_scope": "rust-nostr",
    "js_out_dir": "pkg",
}


def resolve_layout(layout: dict[str, Any] | None) -> dict[str, str]:
    """Return layout dict with defaults filled. Unknown keys are ignored."""
    if layout is None:
        return dict(DEFAULT_LAYOUT)
    out = dict(DEFAULT_LAYOUT)
    out.update({k: str(v) for k, v in layout.items() if k in out})
    return out


def load_layout(project_root: Path, config_path: Path | None = None) -> dict[str, str]:
    """Load layout from config_path (or project_root/nostr-bindings.yaml when present).

    A missing default config file means defaults; an explicit config_path must exist.
    """
    path = config_path if config_path is not None else project_root / CONFIG_FILE_NAME
    if not path.is_file():
        if config_path is not None:
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
        return resolve_layout(None)
    with path.open() as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at top level"
        raise ValueError(msg)
    return resolve_layout(data)


@dataclass(frozen=True)
class BuildContext:
    """Resolved paths, build profile, tool runner and environment for one pipeline run."""

    project_root: Path
    layout: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LAYOUT))
    release: bool = True
    runner: ToolRunner = field(default_factory=ToolRunner)
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)

    @property
    def profile(self) -> str:
        return "release" if self.release else "debug"

    def cargo_profile_args(self) -> list[str]:
        return ["--release"] if self.release else []

    @property
    def library_name(self) -> str:
        return self.layout["library_name"]

    @property
    def target_dir(self) -> Path:
        return self.project_root / self.layout["target_dir"]

    @property
    def ffi_crate_dir(self) -> Path:
        return self.project_root / self.layout["ffi_crate_dir"]

    @property
    def js_crate_dir(self) -> Path:
        return self.project_root / self.layout["js_crate_dir"]

    @property
    def ffi_out_dir(self) -> Path:
        """Scratch output of the ffi crate (ffi/kotlin, ffi/android, ffi/swift-ios, ...)."""
        return self.ffi_crate_dir / self.layout["ffi_out_dir"]

    def crate_path(self, key: str) -> Path:
        """Path of a crate-relative layout entry (android_project_dir, swift_package_dir, ...)."""
        return self.ffi_crate_dir / self.layout[key]

    def tool_env(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        """Complete child-process environment: environ plus per-tool extras."""
        return {**self.environ, **(extra or {})}

    def run_tool(
        self,
        cmd: Sequence[str],
        error_cls: type[PipelineError],
        what: str,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        """run_tool with this context's runner, environment on top of environ."""
        return run_tool(
            self.runner, cmd, error_cls, what, cwd=cwd, env=self.tool_env(env), capture=capture
        )


def make_context(
    project_root: Path,
    *,
    config_path: Path | None = None,
    release: bool = True,
    runner: ToolRunner | None = None,
    environ: Mapping[str, str] | None = None,
) -> BuildContext:
    """BuildContext for project_root with layout loaded from its config file."""
    root = project_root.resolve()
    return BuildContext(
        project_root=root,
        layout=load_layout(root, config_path),
        release=release,
        runner=runner or ToolRunner(),
        environ=os.environ if environ is None else environ,
    )

"""Pytest fixtures for nostr bindings tooling tests."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.targets.compile import expected_artifacts, jni_libs_dir
from nostr_bindings_tooling.targets.matrix import ANDROID_ABIS, get_target, host_target

Effect = Callable[[list[str], Path | None], None]


class FakeRunner:
    """Stands in for ToolRunner: records every command, runs per-prefix side effects.

    The most recently registered matching prefix wins; unmatched commands succeed.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path | None, dict[str, str] | None]] = []
        self._handlers: list[tuple[list[str], Effect | None, int, str]] = []

    def on(
        self,
        *prefix: str,
        effect: Effect | None = None,
        returncode: int = 0,
        stdout: str = "",
    ) -> FakeRunner:
        self._handlers.append((list(prefix), effect, returncode, stdout))
        return self

    def run(self, cmd, *, cwd=None, env=None, capture=False) -> subprocess.CompletedProcess:
        cmd = list(cmd)
        self.calls.append((cmd, cwd, dict(env) if env else None))
        for prefix, effect, rc, out in reversed(self._handlers):
            if cmd[: len(prefix)] == prefix:
                if effect is not None and rc == 0:
                    effect(cmd, cwd)
                return subprocess.CompletedProcess(cmd, rc, out, "")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    @property
    def commands(self) -> list[list[str]]:
        return [c for c, _, _ in self.calls]

    def find(self, *prefix: str) -> list[list[str]]:
        return [c for c in self.commands if c[: len(prefix)] == list(prefix)]


def cargo_effect(ctx: BuildContext) -> Effect:
    """Write the artifacts cargo / cargo-ndk would produce for the command's target."""

    def effect(cmd: list[str], cwd: Path | None) -> None:
        if cmd[1] == "ndk":
            target = get_target(cmd[cmd.index("-t") + 1])
        elif "--target" in cmd:
            target = get_target(cmd[cmd.index("--target") + 1])
        else:
            target = host_target()
        for a in expected_artifacts(ctx, target):
            a.path.parent.mkdir(parents=True, exist_ok=True)
            a.path.write_bytes(f"{target.triple}:{a.format}\n".encode())
        if target.os == "android":
            abi_dir = jni_libs_dir(ctx) / ANDROID_ABIS[target.triple]
            abi_dir.mkdir(parents=True, exist_ok=True)
            (abi_dir / f"lib{ctx.library_name}.so").write_bytes(target.triple.encode())

    return effect


def lipo_effect(cmd: list[str], cwd: Path | None) -> None:
    """lipo -create -output OUT IN...: concatenate inputs in the order given."""
    out = Path(cmd[3])
    out.write_bytes(b"".join(Path(p).read_bytes() for p in cmd[4:]))


def bindgen_effect(cmd: list[str], cwd: Path | None) -> None:
    """uniffi-bindgen: emit a minimal BindingSet for the requested language."""
    lang = cmd[cmd.index("--language") + 1]
    out = Path(cmd[cmd.index("--out-dir") + 1])
    out.mkdir(parents=True, exist_ok=True)
    if lang == "kotlin":
        pkg = out / "rust" / "nostr"
        pkg.mkdir(parents=True, exist_ok=True)
        (pkg / "nostr.kt").write_text("package rust.nostr\n")
    elif lang == "swift":
        (out / "nostr.swift").write_text("import Foundation\n")
        (out / "nostrFFI.h").write_text("#pragma once\n")
        (out / "nostrFFI.modulemap").write_text('module nostrFFI { header "nostrFFI.h" }\n')
    elif lang == "python":
        (out / "nostr.py").write_text("# generated\n")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def ctx(tmp_path: Path, runner: FakeRunner) -> BuildContext:
    """Release context rooted at tmp_path with a fake runner and an empty environment."""
    (tmp_path / "bindings" / "nostr-ffi").mkdir(parents=True)
    (tmp_path / "bindings" / "nostr-js").mkdir(parents=True)
    return BuildContext(project_root=tmp_path, runner=runner, environ={})


@pytest.fixture
def fake_tools(ctx: BuildContext, runner: FakeRunner) -> FakeRunner:
    """runner wired with cargo, cargo-ndk, lipo and uniffi-bindgen fakes."""
    effect = cargo_effect(ctx)
    runner.on("cargo", "build", effect=effect)
    runner.on("cargo", "ndk", effect=effect)
    runner.on("cargo", "run", effect=bindgen_effect)
    runner.on("lipo", "-create", effect=lipo_effect)
    return runner

"""Tests for nostr_bindings_tooling.tools and BuildContext.run_tool."""

import subprocess
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

import pytest

from nostr_bindings_tooling.errors import CompilationFailure, PackagingToolFailure
from nostr_bindings_tooling.targets.compile import compile_target
from nostr_bindings_tooling.targets.matrix import AARCH64_ANDROID
from nostr_bindings_tooling.tools import ToolRunner, run_tool


def _ok(cmd, **kwargs):
    return subprocess.CompletedProcess(cmd, 0, "", "")


class TestToolRunner:
    def test_env_is_passed_as_complete_environment(self) -> None:
        with patch("nostr_bindings_tooling.tools.subprocess.run", side_effect=_ok) as run:
            ToolRunner().run(
                ["cargo", "build"], cwd=Path("/w"), env={"ANDROID_NDK_HOME": "/ndk"}
            )
        kwargs = run.call_args.kwargs
        assert kwargs["env"] == {"ANDROID_NDK_HOME": "/ndk"}
        assert kwargs["cwd"] == str(Path("/w"))

    def test_no_env_inherits(self) -> None:
        with patch("nostr_bindings_tooling.tools.subprocess.run", side_effect=_ok) as run:
            ToolRunner().run(["cargo"])
        assert run.call_args.kwargs["env"] is None


class TestRunTool:
    def test_nonzero_exit_carries_code(self, runner) -> None:
        runner.on("wasm-pack", returncode=3)
        with pytest.raises(PackagingToolFailure) as exc_info:
            run_tool(runner, ["wasm-pack", "build"], PackagingToolFailure, "wasm-pack build")
        assert exc_info.value.exit_code == 3
        assert "wasm-pack build failed (exit 3)" in str(exc_info.value)

    def test_captured_output_in_message(self, runner) -> None:
        runner.on("lipo", returncode=1, stdout="fatal error: bad input")
        with pytest.raises(CompilationFailure) as exc_info:
            run_tool(runner, ["lipo", "-info", "x"], CompilationFailure, "lipo", capture=True)
        assert "fatal error: bad input" in str(exc_info.value)


class TestContextEnvironment:
    def test_context_environ_reaches_child(self, ctx, tmp_path: Path) -> None:
        ndk = str(tmp_path / "ndk")
        c = replace(ctx, runner=ToolRunner(), environ={"ANDROID_NDK_HOME": ndk})
        with patch("nostr_bindings_tooling.tools.subprocess.run", side_effect=_ok) as run:
            # nothing is written by the patched cargo, so the missing artifact fails the build
            with pytest.raises(CompilationFailure):
                compile_target(c, AARCH64_ANDROID)
        assert run.call_args.kwargs["env"] == {"ANDROID_NDK_HOME": ndk}

    def test_extra_env_layered_on_environ(self, ctx) -> None:
        c = replace(ctx, environ={"PATH": "/usr/bin", "WASM_BINDGEN_WEAKREF": "0"})
        extra = {"WASM_BINDGEN_WEAKREF": "1"}
        c.run_tool(["wasm-pack"], PackagingToolFailure, "wasm-pack", env=extra)
        _, _, env = c.runner.calls[-1]
        assert env == {"PATH": "/usr/bin", "WASM_BINDGEN_WEAKREF": "1"}

    def test_tool_env_does_not_mutate_environ(self, ctx) -> None:
        environ = {"A": "1"}
        c = replace(ctx, environ=environ)
        assert c.tool_env({"B": "2"}) == {"A": "1", "B": "2"}
        assert environ == {"A": "1"}

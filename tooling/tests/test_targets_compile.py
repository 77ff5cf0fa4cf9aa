"""Tests for nostr_bindings_tooling.targets.compile."""

from dataclasses import replace
from pathlib import Path

import pytest

from nostr_bindings_tooling.errors import CompilationFailure
from nostr_bindings_tooling.targets.compile import (
    artifact_path,
    compile_command,
    compile_family,
    compile_target,
)
from nostr_bindings_tooling.targets.matrix import get_target, host_target, resolve


class TestArtifactPath:
    def test_cross_target_path_keyed_by_triple_and_profile(self, ctx) -> None:
        t = get_target("aarch64-linux-android")
        assert artifact_path(ctx, t, "dynamic") == (
            ctx.project_root / "target" / "aarch64-linux-android" / "release" / "libnostr_ffi.so"
        )

    def test_apple_static(self, ctx) -> None:
        t = get_target("x86_64-apple-ios")
        assert artifact_path(ctx, t, "static").name == "libnostr_ffi.a"

    def test_debug_profile(self, ctx) -> None:
        dbg = replace(ctx, release=False)
        t = get_target("aarch64-apple-darwin")
        assert artifact_path(dbg, t, "dynamic").parent.name == "debug"

    def test_host_has_no_triple_dir(self, ctx) -> None:
        p = artifact_path(ctx, host_target(), "dynamic")
        assert p.parent == ctx.project_root / "target" / "release"


class TestCompileCommand:
    def test_android_uses_cargo_ndk(self, ctx) -> None:
        cmd = compile_command(ctx, get_target("armv7-linux-androideabi"))
        assert cmd[:4] == ["cargo", "ndk", "-t", "armv7-linux-androideabi"]
        assert cmd[cmd.index("-o") + 1].endswith(str(Path("ffi") / "kotlin" / "jniLibs"))
        assert cmd[-2:] == ["build", "--release"]

    def test_apple_uses_target_flag(self, ctx) -> None:
        cmd = compile_command(ctx, get_target("aarch64-apple-ios"))
        assert cmd == ["cargo", "build", "--release", "--target", "aarch64-apple-ios"]

    def test_debug_drops_release_flag(self, ctx) -> None:
        cmd = compile_command(replace(ctx, release=False), host_target())
        assert cmd == ["cargo", "build"]

    def test_web_is_rejected(self, ctx) -> None:
        with pytest.raises(ValueError):
            compile_command(ctx, get_target("wasm32-unknown-unknown"))


class TestCompileTarget:
    def test_every_target_leaves_artifact_at_expected_path(self, ctx, fake_tools) -> None:
        for family in ("android", "ios", "darwin"):
            for target in resolve(family):
                for a in compile_target(ctx, target):
                    assert a.path.is_file()
                    assert a.path == artifact_path(ctx, target, a.format)
                    assert a.target == target

    def test_runs_in_ffi_crate_dir(self, ctx, fake_tools) -> None:
        compile_target(ctx, get_target("x86_64-apple-darwin"))
        _, cwd, _ = fake_tools.calls[-1]
        assert cwd == ctx.ffi_crate_dir

    def test_cargo_ndk_sees_context_ndk_home(self, ctx, fake_tools, tmp_path: Path) -> None:
        c = replace(ctx, environ={"ANDROID_NDK_HOME": str(tmp_path)})
        compile_target(c, get_target("aarch64-linux-android"))
        cmd, _, env = fake_tools.calls[-1]
        assert cmd[:2] == ["cargo", "ndk"]
        assert env == {"ANDROID_NDK_HOME": str(tmp_path)}

    def test_darwin_produces_dynamic_and_static(self, ctx, fake_tools) -> None:
        formats = [a.format for a in compile_target(ctx, get_target("aarch64-apple-darwin"))]
        assert formats == ["dynamic", "static"]

    def test_compiler_failure_propagates_exit_code(self, ctx, runner) -> None:
        runner.on("cargo", returncode=101)
        with pytest.raises(CompilationFailure) as exc_info:
            compile_target(ctx, get_target("aarch64-apple-ios"))
        assert exc_info.value.exit_code == 101
        assert "aarch64-apple-ios" in str(exc_info.value)

    def test_success_without_artifact_is_failure(self, ctx, runner) -> None:
        runner.on("cargo", "build")
        with pytest.raises(CompilationFailure) as exc_info:
            compile_target(ctx, get_target("aarch64-apple-ios"))
        assert "was not produced" in str(exc_info.value)

    def test_missing_cargo_binary(self, ctx) -> None:
        class Missing:
            def run(self, cmd, **kwargs):
                raise FileNotFoundError(cmd[0])

        with pytest.raises(CompilationFailure) as exc_info:
            compile_target(replace(ctx, runner=Missing()), get_target("aarch64-apple-ios"))
        assert exc_info.value.exit_code == 127


class TestCompileFamily:
    def test_sequential_in_matrix_order(self, ctx, fake_tools) -> None:
        compile_family(ctx, "android")
        triples = [c[3] for c in fake_tools.find("cargo", "ndk")]
        assert triples == [t.triple for t in resolve("android")]

    def test_first_failure_stops_family(self, ctx, fake_tools) -> None:
        fake_tools.on("cargo", "ndk", "-t", "armv7-linux-androideabi", returncode=1)
        with pytest.raises(CompilationFailure):
            compile_family(ctx, "android")
        triples = [c[3] for c in fake_tools.find("cargo", "ndk")]
        assert triples == ["aarch64-linux-android", "armv7-linux-androideabi"]
        assert artifact_path(ctx, get_target("aarch64-linux-android"), "dynamic").is_file()

"""Tests for nostr_bindings_tooling.package.python."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from nostr_bindings_tooling.errors import PackagingToolFailure
from nostr_bindings_tooling.package.python import build_wheel

WHEEL = "nostr_protocol-0.1.0-py3-none-any.whl"


@pytest.fixture
def py_ctx(ctx, fake_tools):
    package_dir = ctx.crate_path("python_package_dir")
    package_dir.mkdir(parents=True)

    def bdist(cmd, cwd):
        dist = Path(cwd) / "dist"
        dist.mkdir(exist_ok=True)
        (dist / WHEEL).write_bytes(b"wheel")

    fake_tools.on(sys.executable, "setup.py", effect=bdist)
    return ctx


@pytest.fixture(autouse=True)
def linux_host():
    with (
        patch("nostr_bindings_tooling.targets.matrix.host_os_family", return_value="linux"),
        patch("nostr_bindings_tooling.targets.matrix.host_arch", return_value="x86_64"),
    ):
        yield


class TestBuildWheel:
    def test_builds_and_installs(self, py_ctx, fake_tools) -> None:
        pkg = build_wheel(py_ctx)
        package_dir = py_ctx.crate_path("python_package_dir")
        assert pkg.family == "python"
        assert pkg.path == package_dir / "dist" / WHEEL

        module_dir = package_dir / "src" / "nostr"
        assert (module_dir / "nostr.py").is_file()
        assert (module_dir / "libnostr_ffi.so").read_bytes() == (
            py_ctx.target_dir / "release" / "libnostr_ffi.so"
        ).read_bytes()

        assert fake_tools.find("cargo", "build") == [["cargo", "build", "--release"]]
        assert fake_tools.commands[-1] == [
            sys.executable, "-m", "pip", "install", str(pkg.path), "--force-reinstall",
        ]  # fmt: skip

    def test_without_install(self, py_ctx, fake_tools) -> None:
        build_wheel(py_ctx, install=False)
        assert fake_tools.find(sys.executable, "-m", "pip") == []

    def test_requirements_installed_first(self, py_ctx, fake_tools) -> None:
        req = py_ctx.crate_path("python_package_dir") / "requirements.txt"
        req.write_text("wheel\n")
        build_wheel(py_ctx, install=False)
        assert fake_tools.commands[0] == [sys.executable, "-m", "pip", "install", "-r", str(req)]

    def test_stale_libraries_removed(self, py_ctx) -> None:
        module_dir = py_ctx.crate_path("python_package_dir") / "src" / "nostr"
        module_dir.mkdir(parents=True)
        (module_dir / "libnostr_ffi.dylib").write_text("old")
        (module_dir / "nostr_ffi.dll").write_text("old")
        build_wheel(py_ctx, install=False)
        assert not (module_dir / "libnostr_ffi.dylib").exists()
        assert not (module_dir / "nostr_ffi.dll").exists()

    def test_stale_dist_removed(self, py_ctx) -> None:
        dist = py_ctx.crate_path("python_package_dir") / "dist"
        dist.mkdir()
        (dist / "nostr_protocol-0.0.1-py3-none-any.whl").write_bytes(b"old")
        pkg = build_wheel(py_ctx, install=False)
        assert [p.name for p in dist.iterdir()] == [pkg.path.name]

    def test_no_wheel_produced(self, py_ctx, fake_tools) -> None:
        fake_tools.on(sys.executable, "setup.py")
        with pytest.raises(PackagingToolFailure) as exc_info:
            build_wheel(py_ctx)
        assert "nostr_protocol*.whl" in str(exc_info.value)

    def test_setup_failure_exit_code(self, py_ctx, fake_tools) -> None:
        fake_tools.on(sys.executable, "setup.py", returncode=2)
        with pytest.raises(PackagingToolFailure) as exc_info:
            build_wheel(py_ctx)
        assert exc_info.value.exit_code == 2

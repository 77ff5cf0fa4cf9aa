"""Shared helpers (library file naming, output-dir hygiene, host detection).

Used by targets, bindgen and package modules.
"""

from __future__ import annotations

import platform
import shutil
from pathlib import Path

# --- Library naming ---

# os family -> format -> (prefix, suffix)
_LIB_NAMING: dict[str, dict[str, tuple[str, str]]] = {
    "android": {"dynamic": ("lib", ".so"), "static": ("lib", ".a")},
    "linux": {"dynamic": ("lib", ".so"), "static": ("lib", ".a")},
    "darwin": {"dynamic": ("lib", ".dylib"), "static": ("lib", ".a")},
    "ios": {"dynamic": ("lib", ".dylib"), "static": ("lib", ".a")},
    "windows": {"dynamic": ("", ".dll"), "static": ("", ".lib")},
}


def library_file_name(library_name: str, os_family: str, fmt: str) -> str:
    """File cargo writes for a cdylib/staticlib (e.g. libnostr_ffi.so, nostr_ffi.dll)."""
    if fmt == "wasm":
        return f"{library_name}_bg.wasm"
    try:
        prefix, suffix = _LIB_NAMING[os_family][fmt]
    except KeyError:
        msg = f"No library naming for os={os_family!r} format={fmt!r}"
        raise ValueError(msg) from None
    return f"{prefix}{library_name}{suffix}"


# --- Host ---


def host_os_family() -> str:
    """darwin, windows or linux (anything else is treated as linux)."""
    system = platform.system()
    if system == "Darwin":
        return "darwin"
    if system == "Windows":
        return "windows"
    return "linux"


def host_arch() -> str:
    """Normalised host CPU architecture (aarch64, x86_64, ...)."""
    machine = platform.machine().lower()
    return {"arm64": "aarch64", "amd64": "x86_64", "x64": "x86_64"}.get(machine, machine)


# --- Output dirs ---


def clean_dir(path: Path) -> Path:
    """Remove path (file or tree) if present, then recreate it empty."""
    remove_path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_path(path: Path) -> None:
    """rm -rf path."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def replace_tree(src: Path, dest: Path) -> None:
    """Copy src tree to dest after deleting whatever dest held before."""
    remove_path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dest)


def rel(path: Path, root: Path) -> str:
    """path relative to root for messages; absolute when outside root."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)

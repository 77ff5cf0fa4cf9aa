"""Fixed target inventory per platform family, plus the Apple universal groups.

This is a closed table: adding a device architecture means adding a row here.
"""

from __future__ import annotations

from dataclasses import dataclass

from nostr_bindings_tooling.helpers import host_arch, host_os_family


@dataclass(frozen=True)
class Target:
    """One compilation target. triple is what cargo/rustup see."""

    triple: str
    os: str
    arch: str
    variant: str | None = None

    @property
    def is_host(self) -> bool:
        return self.triple == "host"


@dataclass(frozen=True)
class UniversalGroup:
    """Named lipo output: members share os and differ only in arch."""

    name: str
    members: tuple[Target, ...]
    formats: tuple[str, ...]

    @property
    def target(self) -> Target:
        """Virtual multi-architecture target the fused artifact is built for."""
        first = self.members[0]
        return Target(self.name, first.os, "universal", first.variant)


AARCH64_ANDROID = Target("aarch64-linux-android", "android", "aarch64")
ARMV7_ANDROID = Target("armv7-linux-androideabi", "android", "armv7", "eabi")
I686_ANDROID = Target("i686-linux-android", "android", "i686")
X86_64_ANDROID = Target("x86_64-linux-android", "android", "x86_64")

AARCH64_IOS = Target("aarch64-apple-ios", "ios", "aarch64")
X86_64_IOS = Target("x86_64-apple-ios", "ios", "x86_64", "sim")
AARCH64_IOS_SIM = Target("aarch64-apple-ios-sim", "ios", "aarch64", "sim")

AARCH64_DARWIN = Target("aarch64-apple-darwin", "darwin", "aarch64")
X86_64_DARWIN = Target("x86_64-apple-darwin", "darwin", "x86_64")

WASM32 = Target("wasm32-unknown-unknown", "web", "wasm32")

TARGET_MATRIX: dict[str, tuple[Target, ...]] = {
    "android": (AARCH64_ANDROID, ARMV7_ANDROID, I686_ANDROID, X86_64_ANDROID),
    "ios": (AARCH64_IOS, X86_64_IOS, AARCH64_IOS_SIM),
    "darwin": (AARCH64_DARWIN, X86_64_DARWIN),
    "web": (WASM32,),
}

# Android jniLibs/<abi> directory per triple
ANDROID_ABIS: dict[str, str] = {
    "aarch64-linux-android": "arm64-v8a",
    "armv7-linux-androideabi": "armeabi-v7a",
    "i686-linux-android": "x86",
    "x86_64-linux-android": "x86_64",
}

UNIVERSAL_GROUPS: dict[str, UniversalGroup] = {
    "ios-universal": UniversalGroup("ios-universal", (AARCH64_IOS, X86_64_IOS), ("static",)),
    "ios-universal-sim": UniversalGroup(
        "ios-universal-sim", (AARCH64_IOS_SIM, X86_64_IOS), ("static",)
    ),
    "darwin-universal": UniversalGroup(
        "darwin-universal", (AARCH64_DARWIN, X86_64_DARWIN), ("dynamic", "static")
    ),
}

# Formats cargo produces per os family (crate-type = ["cdylib", "staticlib"])
OS_FORMATS: dict[str, tuple[str, ...]] = {
    "android": ("dynamic",),
    "ios": ("static",),
    "darwin": ("dynamic", "static"),
    "linux": ("dynamic",),
    "windows": ("dynamic",),
    "web": ("wasm",),
}


def host_target() -> Target:
    """The machine running the pipeline; builds land in target/<profile>/."""
    return Target("host", host_os_family(), host_arch())


def families() -> list[str]:
    return [*TARGET_MATRIX, "host"]


def resolve(family: str) -> tuple[Target, ...]:
    """Ordered targets for a platform family (android, ios, darwin, web, host)."""
    if family == "host":
        return (host_target(),)
    try:
        return TARGET_MATRIX[family]
    except KeyError:
        msg = f"Unknown platform family: {family}. Use {', '.join(families())}."
        raise ValueError(msg) from None


def get_target(triple: str) -> Target:
    for targets in TARGET_MATRIX.values():
        for t in targets:
            if t.triple == triple:
                return t
    msg = f"Unknown target triple: {triple}"
    raise ValueError(msg)


def universal_group(name: str) -> UniversalGroup:
    try:
        return UNIVERSAL_GROUPS[name]
    except KeyError:
        msg = f"Unknown universal group: {name}. Use {', '.join(UNIVERSAL_GROUPS)}."
        raise ValueError(msg) from None


def all_rustup_targets() -> list[str]:
    """Every cross triple in the matrix, in table order (for rustup target add)."""
    return [t.triple for targets in TARGET_MATRIX.values() for t in targets]

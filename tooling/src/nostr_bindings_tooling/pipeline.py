"""Named stages and their dependency DAG (the CLI command surface).

Running a stage runs its dependencies first, depth-first in declaration order,
each stage at most once per invocation. Every tool the plan needs is checked on
PATH before the first stage runs. Stages run sequentially; the first exception
aborts the run and leaves earlier outputs in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.package.android import (
    assemble_aar,
    build_android_libs,
    clean_android,
    generate_kotlin,
    publish_aar,
)
from nostr_bindings_tooling.package.python import build_wheel
from nostr_bindings_tooling.package.swift import assemble_xcframework, swift_module
from nostr_bindings_tooling.package.web import build_web_module
from nostr_bindings_tooling.preconditions import (
    install_toolchain,
    require_env_dir,
    require_tools,
)
from nostr_bindings_tooling.targets.combine import combine_group
from nostr_bindings_tooling.targets.compile import compile_family, compile_target
from nostr_bindings_tooling.targets.matrix import Target, resolve

log = logging.getLogger(__name__)

Action = Callable[[BuildContext], object]


@dataclass(frozen=True)
class Stage:
    name: str
    action: Action | None
    deps: tuple[str, ...] = ()
    help: str = ""
    # executables the action runs (checked with require_tools before the plan starts)
    tools: tuple[str, ...] = ()


class Pipeline:
    """Stage registry + dependency-ordered execution."""

    def __init__(self, stages: Iterable[Stage]) -> None:
        self.stages: dict[str, Stage] = {}
        for s in stages:
            if s.name in self.stages:
                msg = f"Duplicate stage: {s.name}"
                raise ValueError(msg)
            self.stages[s.name] = s
        for s in self.stages.values():
            unknown = [d for d in s.deps if d not in self.stages]
            if unknown:
                msg = f"Stage {s.name} depends on unknown stage(s): {unknown}"
                raise ValueError(msg)

    def names(self) -> list[str]:
        return list(self.stages)

    def plan(self, requested: Iterable[str]) -> list[str]:
        """Execution order for requested stages: dependencies first, no repeats."""
        order: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name not in self.stages:
                msg = f"Unknown stage: {name}. Run 'nostr-bindings stages' for the list."
                raise ValueError(msg)
            if name in visiting:
                cycle = " -> ".join([*visiting[visiting.index(name) :], name])
                msg = f"Stage dependency cycle: {cycle}"
                raise ValueError(msg)
            visiting.append(name)
            for dep in self.stages[name].deps:
                visit(dep)
            visiting.pop()
            done.add(name)
            order.append(name)

        for name in requested:
            visit(name)
        return order

    def tools(self, order: Iterable[str]) -> list[str]:
        """Tools needed by the given stages, first-seen order, no repeats."""
        return list(dict.fromkeys(t for name in order for t in self.stages[name].tools))

    def run(self, ctx: BuildContext, requested: Iterable[str]) -> list[str]:
        """Run the plan. Any stage exception propagates immediately. Returns the stages run."""
        order = self.plan(requested)
        log.info("Plan: %s", " ".join(order))
        tools = self.tools(order)
        if tools:
            require_tools(tools)
        for name in order:
            stage = self.stages[name]
            if stage.action is None:
                continue
            print(f"▶ {name}")
            stage.action(ctx)
        return order


def _compile_one(target: Target) -> Action:
    return lambda ctx: compile_target(ctx, target)


def _universal(family: str, groups: tuple[str, ...]) -> Action:
    def action(ctx: BuildContext) -> None:
        compile_family(ctx, family)
        for g in groups:
            combine_group(ctx, g)

    return action


def default_stages() -> list[Stage]:
    android = resolve("android")
    ndk_tools = ("cargo", "cargo-ndk")
    apple_tools = ("cargo", "lipo")
    swift_tools = ("cargo", "swiftc")
    stages = [
        Stage("init", install_toolchain, help="rustup targets + cargo-ndk/cbindgen/cargo-lipo"),
        Stage(
            "ndk-home",
            lambda ctx: require_env_dir("ANDROID_NDK_HOME", ctx.environ),
            help="require ANDROID_NDK_HOME",
        ),
        Stage(
            "sdk-root",
            lambda ctx: require_env_dir("ANDROID_SDK_ROOT", ctx.environ),
            help="require ANDROID_SDK_ROOT",
        ),
        Stage("clean-android", clean_android, help="remove ffi/android and ffi/kotlin"),
    ]
    stages += [
        Stage(
            t.triple,
            _compile_one(t),
            ("ndk-home",),
            help=f"cargo ndk build for {t.triple}",
            tools=ndk_tools,
        )
        for t in android
    ]
    stages += [
        Stage(
            "android",
            build_android_libs,
            ("ndk-home",),
            help="all Android ABIs into ffi/kotlin/jniLibs",
            tools=ndk_tools,
        ),
        Stage(
            "kotlin",
            generate_kotlin,
            ("clean-android", "android"),
            help="Kotlin bindings into ffi/kotlin",
            tools=("cargo",),
        ),
        Stage(
            "bindings-android",
            assemble_aar,
            ("sdk-root", "kotlin"),
            help="AAR via bindings-android gradlew assemble",
        ),
        Stage(
            "publish-android",
            publish_aar,
            ("bindings-android",),
            help="publish AAR to Sonatype",
        ),
        Stage(
            "ios-universal",
            _universal("ios", ("ios-universal", "ios-universal-sim")),
            help="iOS device/simulator libs + universal libs",
            tools=apple_tools,
        ),
        Stage(
            "darwin-universal",
            _universal("darwin", ("darwin-universal",)),
            help="macOS libs + universal .dylib/.a",
            tools=apple_tools,
        ),
        Stage(
            "swift-ios",
            lambda ctx: swift_module(ctx, "ios"),
            ("ios-universal",),
            help="Swift bindings + swiftc check (iOS)",
            tools=swift_tools,
        ),
        Stage(
            "swift-darwin",
            lambda ctx: swift_module(ctx, "darwin"),
            ("darwin-universal",),
            help="Swift bindings + swiftc check (macOS)",
            tools=swift_tools,
        ),
        Stage(
            "bindings-swift",
            assemble_xcframework,
            ("ios-universal", "darwin-universal"),
            help="bindings-swift Sources + xcframework slices",
            tools=("cargo",),
        ),
        Stage(
            "python",
            build_wheel,
            help="host build + Python wheel (installed)",
            tools=("cargo",),
        ),
        Stage(
            "js",
            build_web_module,
            help="wasm-pack build + embedded wasm loader",
            tools=("wasm-pack",),
        ),
    ]
    return stages


def default_pipeline() -> Pipeline:
    return Pipeline(default_stages())

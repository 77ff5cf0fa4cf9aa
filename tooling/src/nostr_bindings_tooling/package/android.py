"""Android: .so per ABI via cargo-ndk, Kotlin bindings, AAR via the bindings-android Gradle project.

Layout (ffi crate relative):
    ffi/kotlin/jniLibs/<abi>/lib<name>.so   cargo-ndk output
    ffi/kotlin/<package dirs>/*.kt          uniffi-bindgen output
    bindings-android/lib/src/main/{jniLibs,kotlin}
    ffi/android/lib-release.aar             final package
"""

from __future__ import annotations

import shutil
from pathlib import Path

from nostr_bindings_tooling.bindgen import BindingSet, generate_bindings
from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import MergeInputMissing, PackagingToolFailure
from nostr_bindings_tooling.helpers import clean_dir, rel, remove_path, replace_tree
from nostr_bindings_tooling.package.common import PlatformPackage
from nostr_bindings_tooling.preconditions import require_env_dir
from nostr_bindings_tooling.targets.compile import (
    CompiledArtifact,
    artifact_path,
    compile_family,
    jni_libs_dir,
)
from nostr_bindings_tooling.targets.matrix import X86_64_ANDROID

AAR_RELATIVE = ("lib", "build", "outputs", "aar", "lib-release.aar")

PUBLISH_TASKS = ("publishToSonatype", "closeAndReleaseSonatypeStagingRepository")


def kotlin_out_dir(ctx: BuildContext) -> Path:
    return ctx.ffi_out_dir / "kotlin"


def android_out_dir(ctx: BuildContext) -> Path:
    return ctx.ffi_out_dir / "android"


def clean_android(ctx: BuildContext) -> None:
    remove_path(android_out_dir(ctx))
    remove_path(kotlin_out_dir(ctx))
    print(f"🧹 Removed {rel(ctx.ffi_out_dir, ctx.project_root)}/{{android,kotlin}}")


def build_android_libs(ctx: BuildContext) -> list[CompiledArtifact]:
    """All four ABIs through cargo-ndk (needs ANDROID_NDK_HOME)."""
    require_env_dir("ANDROID_NDK_HOME", ctx.environ)
    return compile_family(ctx, "android")


def generate_kotlin(ctx: BuildContext) -> BindingSet:
    """Kotlin bindings from the x86_64 .so (all ABIs export the same interface)."""
    lib = CompiledArtifact(
        artifact_path(ctx, X86_64_ANDROID, "dynamic"), X86_64_ANDROID, "dynamic"
    )
    return generate_bindings(ctx, lib, "kotlin", kotlin_out_dir(ctx), format_code=False)


def assemble_aar(ctx: BuildContext) -> PlatformPackage:
    """Copy jniLibs + Kotlin sources into the Gradle project, ./gradlew assemble, collect the AAR."""
    require_env_dir("ANDROID_SDK_ROOT", ctx.environ)
    project = ctx.crate_path("android_project_dir")
    main = project / "lib" / "src" / "main"
    jni = jni_libs_dir(ctx)
    kotlin_src = kotlin_out_dir(ctx)
    if not jni.is_dir():
        msg = f"{jni} not found; build the android targets first"
        raise MergeInputMissing(msg)

    replace_tree(jni, main / "jniLibs")
    kotlin_dest = clean_dir(main / "kotlin")
    for child in sorted(kotlin_src.iterdir()):
        if child.name == jni.name:
            continue
        if child.is_dir():
            shutil.copytree(child, kotlin_dest / child.name)
        else:
            shutil.copy2(child, kotlin_dest / child.name)

    print("🔨 Assembling AAR...")
    ctx.run_tool(
        ["./gradlew", "assemble"],
        PackagingToolFailure,
        "gradlew assemble",
        cwd=project,
    )
    aar = project.joinpath(*AAR_RELATIVE)
    if not aar.is_file():
        msg = f"gradlew assemble succeeded but {aar} was not produced"
        raise PackagingToolFailure(msg)
    dest = clean_dir(android_out_dir(ctx)) / aar.name
    shutil.copy2(aar, dest)
    print(f"✅ {rel(dest, ctx.project_root)}")
    return PlatformPackage("android", dest)


def publish_aar(ctx: BuildContext) -> None:
    """Publish the Gradle project to Sonatype (credentials come from Gradle properties)."""
    project = ctx.crate_path("android_project_dir")
    print("📤 Publishing AAR...")
    ctx.run_tool(
        ["./gradlew", *PUBLISH_TASKS],
        PackagingToolFailure,
        "gradlew publish",
        cwd=project,
    )
    print("✅ Published")

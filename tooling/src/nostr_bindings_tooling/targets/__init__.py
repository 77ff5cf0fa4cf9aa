"""Target matrix, cross-compilation driver and universal-artifact combiner."""

from .combine import combine, combine_group, inspect_architectures, universal_path
from .compile import (
    CompiledArtifact,
    artifact_path,
    compile_family,
    compile_target,
    expected_artifacts,
)
from .matrix import (
    ANDROID_ABIS,
    TARGET_MATRIX,
    UNIVERSAL_GROUPS,
    Target,
    UniversalGroup,
    get_target,
    host_target,
    resolve,
    universal_group,
)

__all__ = [
    "ANDROID_ABIS",
    "TARGET_MATRIX",
    "UNIVERSAL_GROUPS",
    "CompiledArtifact",
    "Target",
    "UniversalGroup",
    "artifact_path",
    "combine",
    "combine_group",
    "compile_family",
    "compile_target",
    "expected_artifacts",
    "get_target",
    "host_target",
    "inspect_architectures",
    "resolve",
    "universal_group",
    "universal_path",
]

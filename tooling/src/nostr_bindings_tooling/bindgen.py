"""Run uniffi-bindgen against one compiled library for one destination language.

The generator is a black box: `cargo run -p uniffi-bindgen generate --library <lib>
--language <lang> [--no-format] --out-dir <dir>`, run from the ffi crate.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nostr_bindings_tooling.config import BuildContext
from nostr_bindings_tooling.errors import GenerationFailure
from nostr_bindings_tooling.helpers import clean_dir, rel
from nostr_bindings_tooling.targets.compile import CompiledArtifact

SOURCE_SUFFIXES: dict[str, str] = {
    "kotlin": ".kt",
    "swift": ".swift",
    "python": ".py",
}

HEADER_SUFFIXES = (".h", ".modulemap")


@dataclass(frozen=True)
class BindingSet:
    """Generated sources (+ C headers/modulemaps for swift) for one language and one library."""

    language: str
    artifact: CompiledArtifact
    out_dir: Path
    sources: tuple[Path, ...]
    headers: tuple[Path, ...] = ()

    def header(self, suffix: str) -> Path | None:
        """First header with the given suffix (e.g. .modulemap), or None."""
        for h in self.headers:
            if h.suffix == suffix:
                return h
        return None


def bindgen_command(
    ctx: BuildContext,
    artifact: CompiledArtifact,
    language: str,
    out_dir: Path,
    format_code: bool = True,
) -> list[str]:
    cmd = [
        "cargo",
        "run",
        "-p",
        ctx.layout["bindgen_package"],
        "generate",
        "--library",
        str(artifact.path),
        "--language",
        language,
    ]
    if not format_code:
        cmd.append("--no-format")
    cmd += ["--out-dir", str(out_dir)]
    return cmd


def _collect(out_dir: Path, language: str) -> tuple[tuple[Path, ...], tuple[Path, ...]]:
    suffix = SOURCE_SUFFIXES[language]
    sources = tuple(sorted(p for p in out_dir.rglob(f"*{suffix}") if p.is_file()))
    headers = tuple(
        sorted(p for p in out_dir.rglob("*") if p.is_file() and p.suffix in HEADER_SUFFIXES)
    )
    return sources, headers


def generate_bindings(
    ctx: BuildContext,
    artifact: CompiledArtifact,
    language: str,
    out_dir: Path,
    format_code: bool = True,
    clean: bool = False,
) -> BindingSet:
    """Generate bindings into out_dir. clean=True empties out_dir first.

    Callers that share out_dir with other outputs (ffi/kotlin also holds jniLibs)
    leave clean off and clear the directory themselves.
    """
    if language not in SOURCE_SUFFIXES:
        msg = f"Unsupported binding language: {language}. Use {', '.join(SOURCE_SUFFIXES)}."
        raise ValueError(msg)
    if not artifact.path.is_file():
        msg = f"Library for {language} bindings not found: {artifact.path}"
        raise GenerationFailure(msg)
    if clean:
        clean_dir(out_dir)
    else:
        out_dir.mkdir(parents=True, exist_ok=True)

    print(f"🔨 Generating {language} bindings from {artifact.path.name}...")
    ctx.run_tool(
        bindgen_command(ctx, artifact, language, out_dir, format_code),
        GenerationFailure,
        f"uniffi-bindgen ({language})",
        cwd=ctx.ffi_crate_dir,
    )
    sources, headers = _collect(out_dir, language)
    if not sources:
        msg = f"uniffi-bindgen ({language}) produced no {SOURCE_SUFFIXES[language]} files in {out_dir}"
        raise GenerationFailure(msg)
    print(f"  ✅ {len(sources)} source file(s) in {rel(out_dir, ctx.project_root)}")
    return BindingSet(language, artifact, out_dir, sources, headers)

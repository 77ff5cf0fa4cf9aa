"""Pipeline failure taxonomy. Every failure is fatal; nothing here is retried."""

from __future__ import annotations


class PipelineError(Exception):
    """Base for stage failures. exit_code is what the CLI exits with."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code or 1


class PreconditionUnsatisfied(PipelineError):
    """A required env directory or tool is missing (raised before any build work)."""


class CompilationFailure(PipelineError):
    """The native compiler (or lipo) exited non-zero or left no artifact."""


class MergeInputMissing(PipelineError):
    """A universal artifact input is not on disk; never produce a partial fat binary."""


class GenerationFailure(PipelineError):
    """uniffi-bindgen exited non-zero."""


class PackagingToolFailure(PipelineError):
    """Gradle, swiftc, setup.py, pip or wasm-pack exited non-zero."""


class TransformPatternMismatch(PipelineError):
    """The wasm-bindgen loader no longer matches the line patterns the embed transform strips."""

"""PlatformPackage result type shared by the per-ecosystem assemblers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PlatformPackage:
    """Finished distributable: AAR file, xcframework dir, wheel file or web pkg/ dir."""

    family: str
    path: Path

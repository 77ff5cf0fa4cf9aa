"""Platform package assemblers: Android AAR, Swift xcframework, Python wheel, web module."""

from .android import (
    assemble_aar,
    build_android_libs,
    clean_android,
    generate_kotlin,
    publish_aar,
)
from .common import PlatformPackage
from .python import build_wheel
from .swift import assemble_xcframework, swift_module
from .web import build_web_module

__all__ = [
    "PlatformPackage",
    "assemble_aar",
    "assemble_xcframework",
    "build_android_libs",
    "build_web_module",
    "build_wheel",
    "clean_android",
    "generate_kotlin",
    "publish_aar",
    "swift_module",
]

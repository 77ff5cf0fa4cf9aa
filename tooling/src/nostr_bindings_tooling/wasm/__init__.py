"""WebAssembly packaging: embed the wasm binary into the wasm-pack JS loader."""

from .embed import (
    DEFAULT_EPILOGUE_DTS,
    DEFAULT_EPILOGUE_JS,
    StripReport,
    embed_wasm,
    is_path_construction,
    is_text_coder_import,
    render_wasm_module,
    strip_loader,
    transform_loader,
)

__all__ = [
    "DEFAULT_EPILOGUE_DTS",
    "DEFAULT_EPILOGUE_JS",
    "StripReport",
    "embed_wasm",
    "is_path_construction",
    "is_text_coder_import",
    "render_wasm_module",
    "strip_loader",
    "transform_loader",
]

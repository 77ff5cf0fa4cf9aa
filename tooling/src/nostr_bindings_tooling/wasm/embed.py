"""Embed the wasm-pack binary as base64 so one loader works under webpack, browserify and jest.

wasm-pack's nodejs loader reads <module>_bg.wasm with fs/path, which bundlers and
browsers do not provide consistently. The transform:

1. writes <module>_bg.wasm.js exporting the wasm bytes as a base64 string,
2. drops the loader's `TextDecoder`/`TextEncoder` require('util') lines (the
   globals are used instead),
3. drops everything from the first `const path = ` line to the end of the file
   (the fs-based loading code),
4. appends an epilogue that decodes the base64 payload and instantiates the module,
5. appends the matching declarations to <module>.d.ts.

The line rules are coupled to wasm-bindgen's output format. When the path rule
finds nothing the loader would still try to read the file from disk, so that is an
error unless strict=False.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from nostr_bindings_tooling.errors import TransformPatternMismatch

log = logging.getLogger(__name__)

_TEXT_CODER_IMPORT = re.compile(r"Text..coder.*= require\(.util.\)")
_PATH_CONSTRUCTION_PREFIX = "const path = "

MODULE_PLACEHOLDER = "@WASM_MODULE@"

DEFAULT_EPILOGUE_JS = """\
let inited = false;

function decodeBase64(text) {
    const clean = text.replace(/\\s+/g, "");
    if (typeof Buffer !== "undefined") {
        return new Uint8Array(Buffer.from(clean, "base64"));
    }
    const binary = atob(clean);
    const bytes = new Uint8Array(binary.length);
    for (let i = 0; i < binary.length; i++) {
        bytes[i] = binary.charCodeAt(i);
    }
    return bytes;
}

module.exports.loadWasmBytes = function () {
    return decodeBase64(require("./@WASM_MODULE@_bg.wasm.js"));
};

module.exports.loadWasmAsync = async function () {
    if (!inited) {
        const { instance } = await WebAssembly.instantiate(module.exports.loadWasmBytes(), imports);
        wasm = instance.exports;
        module.exports.__wasm = wasm;
        inited = true;
    }
    return wasm;
};
"""

DEFAULT_EPILOGUE_DTS = """
/**
 * Decode the embedded WebAssembly binary.
 */
export function loadWasmBytes(): Uint8Array;
/**
 * Instantiate the embedded WebAssembly module. Must resolve before any other export is used.
 */
export function loadWasmAsync(): Promise<WebAssembly.Exports>;
"""


@dataclass(frozen=True)
class StripReport:
    """What strip_loader removed. path_line is the 0-based index where the tail cut started."""

    text_coder_lines: tuple[int, ...]
    path_line: int | None
    total_lines: int

    @property
    def removed(self) -> int:
        tail = self.total_lines - self.path_line if self.path_line is not None else 0
        return len(self.text_coder_lines) + tail


def is_text_coder_import(line: str) -> bool:
    """`const { TextDecoder, TextEncoder } = require(`util`);` and friends."""
    return _TEXT_CODER_IMPORT.search(line) is not None


def is_path_construction(line: str) -> bool:
    """Start of the fs-based wasm loading tail (`const path = require('path')...`)."""
    return line.startswith(_PATH_CONSTRUCTION_PREFIX)


def strip_loader(source: str) -> tuple[str, StripReport]:
    """Remove text-coder imports and everything from the first path line to EOF."""
    lines = source.splitlines(keepends=True)
    kept: list[str] = []
    coder_lines: list[int] = []
    path_line: int | None = None
    for i, line in enumerate(lines):
        if is_path_construction(line):
            path_line = i
            break
        if is_text_coder_import(line):
            coder_lines.append(i)
            continue
        kept.append(line)
    head = "".join(kept)
    if head and not head.endswith("\n"):
        head += "\n"
    return head, StripReport(tuple(coder_lines), path_line, len(lines))


def render_wasm_module(data: bytes) -> str:
    """CommonJS module exporting data as base64 (76-column lines, like the base64 CLI)."""
    payload = base64.encodebytes(data).decode("ascii").rstrip("\n")
    return f"module.exports = `{payload}`;\n"


def transform_loader(
    source: str, epilogue: str, *, strict: bool = True, label: str = "loader"
) -> str:
    """Stripped loader head followed by the epilogue verbatim."""
    head, report = strip_loader(source)
    if report.path_line is None:
        msg = (
            f"{label}: no line starting with {_PATH_CONSTRUCTION_PREFIX!r}; "
            "the fs-based wasm loading code would be kept"
        )
        if strict:
            raise TransformPatternMismatch(msg)
        log.warning(msg)
    if not report.text_coder_lines:
        log.warning("%s: no TextDecoder/TextEncoder require('util') line found", label)
    log.debug("%s: removed %d of %d lines", label, report.removed, report.total_lines)
    return head + epilogue


def _load_epilogue(override: Path | None, default: str, module_name: str) -> str:
    if override is not None and override.is_file():
        return override.read_text()
    return default.replace(MODULE_PLACEHOLDER, module_name)


def embed_wasm(
    pkg_dir: Path,
    module_name: str,
    *,
    epilogue_js: Path | None = None,
    epilogue_dts: Path | None = None,
    strict: bool = True,
) -> Path:
    """Rewrite a wasm-pack nodejs pkg/ in place. Returns the generated <module>_bg.wasm.js path."""
    wasm_path = pkg_dir / f"{module_name}_bg.wasm"
    loader_path = pkg_dir / f"{module_name}.js"
    dts_path = pkg_dir / f"{module_name}.d.ts"
    for p in (wasm_path, loader_path):
        if not p.is_file():
            msg = f"wasm-pack output missing: {p}"
            raise FileNotFoundError(msg)

    embedded = pkg_dir / f"{module_name}_bg.wasm.js"
    embedded.write_text(render_wasm_module(wasm_path.read_bytes()))

    js_epilogue = _load_epilogue(epilogue_js, DEFAULT_EPILOGUE_JS, module_name)
    new_loader = transform_loader(
        loader_path.read_text(), js_epilogue, strict=strict, label=loader_path.name
    )
    tmp = loader_path.with_name(loader_path.name + ".new")
    tmp.write_text(new_loader)
    tmp.replace(loader_path)

    if dts_path.is_file():
        dts_epilogue = _load_epilogue(epilogue_dts, DEFAULT_EPILOGUE_DTS, module_name)
        with dts_path.open("a") as f:
            f.write(dts_epilogue)
    else:
        log.warning("%s not found; type declarations not extended", dts_path)
    return embedded

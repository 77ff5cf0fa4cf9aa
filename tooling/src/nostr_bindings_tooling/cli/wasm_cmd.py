"""`nostr-bindings wasm-embed <pkg_dir>`: run the embedding transform on an existing wasm-pack pkg/."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from nostr_bindings_tooling.cli.common import configure_logging, path_resolver
from nostr_bindings_tooling.config import load_layout
from nostr_bindings_tooling.errors import PipelineError
from nostr_bindings_tooling.wasm.embed import embed_wasm


def run_wasm_embed_argv(argv: list[str] | None = None) -> None:
    """Parse argv and embed. argv defaults to sys.argv[2:] when called from main.

    Without --module the name comes from the layout's js_module_name.
    """
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    ap = argparse.ArgumentParser(
        prog="nostr-bindings wasm-embed",
        description="Embed <module>_bg.wasm as base64 and rewrite the wasm-pack loader",
    )
    ap.add_argument("pkg_dir", type=path_resolver, help="wasm-pack --out-dir (e.g. pkg)")
    ap.add_argument(
        "--module",
        default=None,
        help="wasm-pack module name (default: js_module_name from the layout)",
    )
    ap.add_argument(
        "--project-root",
        type=path_resolver,
        default=Path.cwd(),
        help="Workspace root holding nostr-bindings.yaml (default: cwd)",
    )
    ap.add_argument("--config", type=path_resolver, default=None, help="Layout YAML")
    ap.add_argument("--epilogue-js", type=path_resolver, default=None, help="Custom JS epilogue")
    ap.add_argument("--epilogue-dts", type=path_resolver, default=None, help="Custom .d.ts epilogue")
    ap.add_argument(
        "--no-strict",
        action="store_true",
        help="Warn instead of failing when the loader no longer matches the strip patterns",
    )
    ap.add_argument("-v", "--verbose", action="count", default=0)
    args = ap.parse_args(argv)
    configure_logging(args.verbose)
    try:
        module = args.module or load_layout(args.project_root, args.config)["js_module_name"]
        out = embed_wasm(
            args.pkg_dir,
            module,
            epilogue_js=args.epilogue_js,
            epilogue_dts=args.epilogue_dts,
            strict=not args.no_strict,
        )
    except PipelineError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    except (OSError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    print(f"✅ Wrote {out}")
    sys.exit(0)

"""Main CLI entry point for nostr bindings tooling."""

import sys

from nostr_bindings_tooling.cli import stage_cmd, wasm_cmd


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print("Usage: nostr-bindings <command> [args...]", file=sys.stderr)
        print("Commands:", file=sys.stderr)
        print(
            "  <stage> [<stage> ...]  - Run stages and their dependencies (e.g. bindings-android, python, js)",
            file=sys.stderr,
        )
        print("  stages                 - List stages and their dependencies", file=sys.stderr)
        print(
            "  wasm-embed <pkg_dir>   - Embed the wasm binary into an existing wasm-pack pkg/",
            file=sys.stderr,
        )
        sys.exit(1)

    command = sys.argv[1]

    if command == "stages":
        stage_cmd.run_stages_list_argv(sys.argv[2:])
    elif command == "wasm-embed":
        wasm_cmd.run_wasm_embed_argv(sys.argv[2:])
    else:
        stage_cmd.run_stage_argv(sys.argv[1:])


if __name__ == "__main__":
    main()

"""Command-line entry points (`nostr-bindings`)."""

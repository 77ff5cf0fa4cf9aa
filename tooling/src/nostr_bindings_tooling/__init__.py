"""Release tooling for the rust-nostr bindings: cross-compile the ffi crate, run uniffi-bindgen,
assemble the Android/Swift/Python/web packages.
"""

__version__ = "0.1.0"

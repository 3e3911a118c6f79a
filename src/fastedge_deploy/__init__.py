"""Deploy WebAssembly applications and secrets to FastEdge."""

__version__ = "0.1.0"

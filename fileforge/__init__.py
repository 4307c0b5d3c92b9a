"""File Forge: a virtual file store with permission-gated operations."""

__version__ = "0.1.0"

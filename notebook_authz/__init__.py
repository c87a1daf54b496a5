"""Access control for collaborative notebook servers."""

__version__ = "0.1.0"

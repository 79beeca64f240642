"""lazyindex — catalog and query surface for lazy-load image indices."""

__version__ = "0.1.0"

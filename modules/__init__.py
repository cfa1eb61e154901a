"""Helper modules for the storefront backend."""

__all__ = [
    "pricing",
    "sanitizer",
]

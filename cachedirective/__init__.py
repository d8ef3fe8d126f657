"""Parse and merge HTTP cache middleware configuration blocks."""

__version__ = "0.1.0"

__all__ = ["__version__"]
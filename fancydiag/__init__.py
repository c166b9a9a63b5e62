"""Diagnostic protocol types and span reading over source code."""

__version__ = "7.5.0"
__all__ = ["protocol", "sources"]
"""Bridge between GitHub issues and generic, attribute-based task documents."""

__version__ = "0.1.0"

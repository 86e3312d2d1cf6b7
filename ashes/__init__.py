"""Ashes registry: storage records and locations over a hosted REST backend."""

__version__ = "0.1.0"

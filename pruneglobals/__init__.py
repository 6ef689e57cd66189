"""Annotate or disable unused global assignments across a directory of scripts."""

__version__ = "0.1.0"

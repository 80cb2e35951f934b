"""Publish protection engine: gates publishing on reference and remote validation."""

__version__ = "0.1.0"

"""Glacier verifier node manager."""

__version__ = "0.1.0"

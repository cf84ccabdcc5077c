"""Bidirectional settings sync between a workspace file and its folders."""

__version__ = "0.3.0"

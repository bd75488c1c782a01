"""Bookmark and mark tagging: state store, persistence services and tag propagation."""

__version__ = "0.1.0"

"""Resize rollable-table tokens when their side changes, and repair their side lists."""

__version__ = "0.0.1"

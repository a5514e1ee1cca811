"""Test and CI variant ownership mapping."""

__version__ = "0.1.0"

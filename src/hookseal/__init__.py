"""Hookseal - webhook signature signing and verification."""

__version__ = "0.1.0"

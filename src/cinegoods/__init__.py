"""Goods event crawler for Korean cinema chains."""

__version__ = "0.1.0"

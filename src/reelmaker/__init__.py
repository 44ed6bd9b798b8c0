"""Reel maker: narrated scenes into a vertical short video."""

__version__ = "0.1.0"

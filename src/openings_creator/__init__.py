"""Openings Creator: sized wall openings where ducts and pipes cross walls."""

__version__ = "0.1.0"

"""Convert Opera notes exports into Tomboy notes."""

__version__ = "0.1.0"

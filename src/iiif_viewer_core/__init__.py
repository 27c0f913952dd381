"""Core of the IIIF search viewer: content-search aggregation and view state."""

__version__ = "0.1.0"

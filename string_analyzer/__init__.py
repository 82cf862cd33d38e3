"""String analysis service: content-addressed records and natural-language filters."""

__version__ = "1.0.0"

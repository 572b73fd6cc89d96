"""Family graph construction and layout for markdown genealogy records."""

__version__ = "0.1.0"

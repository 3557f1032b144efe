"""htmldocs - build a flat HTML site from a Markdown documentation tree."""

__version__ = "0.1.0"

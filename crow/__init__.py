"""crow (command row) - memorize CLI commands and fuzzy search them."""

__version__ = "0.5.2"

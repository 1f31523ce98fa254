"""slipbox: Markdown notes with hierarchical slugs and consistent wikilinks."""

__version__ = "0.3.0"

"""wiki-intel: paid Wikipedia & Wikidata knowledge entrypoints for agents."""

__version__ = "1.0.0"

"""Ball-sort puzzle solver built on a generic A* search engine."""

__version__ = "0.1.0"

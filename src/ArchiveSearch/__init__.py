"""ArchiveSearch: search-criteria builder and saved-group engine."""

__version__ = "0.1.0"

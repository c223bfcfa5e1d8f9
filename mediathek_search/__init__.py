"""mediathek-search: compile user search strings into query trees."""

__version__ = "0.1.0"

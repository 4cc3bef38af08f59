"""Download course pages and convert them to portable documents."""

__version__ = "0.1.0"

"""Fleet issue offline queue and sync service."""

__version__ = "0.1.0"

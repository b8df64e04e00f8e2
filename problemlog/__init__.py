"""Problem Log back-office service."""

__version__ = "0.3.0"

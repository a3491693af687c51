"""gitcc - a structured, continuously refreshed view of git repositories."""

__version__ = "0.4.0"

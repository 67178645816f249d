"""Version information."""

__version__ = "0.4.0"

"""KoLmafia ascension log parser and timeline builder."""

from mafialog.version import __version__

__all__ = ["__version__"]

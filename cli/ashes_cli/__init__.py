"""Terminal front-end for the ashes registry."""

from ashes import __version__

__all__ = ["__version__"]

"""Desktop client for Tactical RMM servers."""

from .config import VERSION

__version__ = VERSION

__all__ = ["__version__"]

"""
Shared server resources.
"""

from .cache import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache"]

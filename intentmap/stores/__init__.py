"""Caller-side stores for resolution results."""

from .resolution_cache import ResolutionCache, resolution_key

__all__ = ["ResolutionCache", "resolution_key"]

"""Caching infrastructure for import previews."""

from .preview_cache import CacheStats, PreviewCache, PreviewSummary

__all__ = ["CacheStats", "PreviewCache", "PreviewSummary"]

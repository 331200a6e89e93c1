# ABOUTME: Network and storage collaborators used by the extractor
# ABOUTME: Disk-cached page fetching and the local image store

"""
Services Layer: Fetching and storage

This layer handles:
- Rate-limited, retried downloads with an on-disk response cache
- Image storage under stable identifiers, with PNG to WebP compression

Data Flow: Bulbapedia → fetch cache → extraction layer
"""

from .fetcher import FetchError, Fetcher
from .image_cache import ImageCache, ImageCacheError

__all__ = ["FetchError", "Fetcher", "ImageCache", "ImageCacheError"]

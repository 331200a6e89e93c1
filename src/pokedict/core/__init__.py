# ABOUTME: Business logic and orchestration layer
# ABOUTME: Domain models plus the batch build service that drives extraction and rendering

"""
Core Layer: Domain models and build orchestration

This layer handles:
- Dex numbers, entry records, and the index
- Parallel extraction of every selected page
- Rendering and writing the dictionary document

Data Flow: Index → per-page EntryRecord → Dictionary.xml
"""

from .models import DexId, EntryImage, EntryRecord, Index, UnknownEntryError, UnknownGenerationError

# Import service on-demand to avoid circular imports
# Use: from pokedict.core.service import DictionaryBuildService

__all__ = [
    "DexId",
    "EntryImage",
    "EntryRecord",
    "Index",
    "UnknownEntryError",
    "UnknownGenerationError",
]

# ABOUTME: Structural extraction of Bulbapedia pages into entry records
# ABOUTME: Pipeline Stage 1: Raw page markup → validated EntryRecord

"""
Extraction Layer: Pages to records

This layer handles:
- Parsing pages into namespaced DOM trees
- Validating the fixed Pokémon page layout and reading its fields
- Rewriting links into dictionary cross-references and images into cache paths
- Serializing fragments as strict XHTML

Data Flow: Fetcher → page markup → EntryRecord → rendering layer
"""

from .base import (
    DownstreamFailure,
    ExtractionError,
    MissingElement,
    ParseFailure,
    StructuralMismatch,
    UnexpectedShape,
)

__all__ = [
    "DownstreamFailure",
    "ExtractionError",
    "MissingElement",
    "ParseFailure",
    "StructuralMismatch",
    "UnexpectedShape",
]

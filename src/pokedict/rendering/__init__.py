# ABOUTME: Output generation for the compiled dictionary
# ABOUTME: Pipeline Stage 2: EntryRecord mapping → Dictionary.xml text

"""
Rendering Layer: Records to dictionary source

This layer handles:
- Entry markup (header, gallery, info tables, article text)
- Search index names derived from names and image captions

Data Flow: extraction layer → EntryRecord → Dictionary.xml
"""

from .dictionary import RenderError, render_dictionary, render_entry

__all__ = ["RenderError", "render_dictionary", "render_entry"]

"""
Preview Builder Module

Applies mappings to sample legacy records and shows the resulting
core_entities, core_dynamic_data and core_metadata rows.
"""

from .preview_builder import PreviewBuilder, RecordPreview

__all__ = [
    "PreviewBuilder",
    "RecordPreview",
]

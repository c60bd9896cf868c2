"""
Structure Introspection Module

Infers entities and typed fields from parsed legacy data:
- List of records or dict of record lists
- Field types from the first record
- Required flags from every record
"""

from .structure_analyzer import StructureAnalyzer, infer_field_type

__all__ = [
    "StructureAnalyzer",
    "infer_field_type",
]

"""HERA Legacy Mapper: maps legacy datasets and business requirements onto the universal schema."""

__version__ = "0.1.0"

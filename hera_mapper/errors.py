"""Exception types raised by the mapping engine."""
from decimal import Decimal
from typing import List, Optional


class HeraMapperError(Exception):
    """Base class for all mapper errors."""


class ParseError(HeraMapperError):
    """Raised when uploaded content is not valid for its declared type."""

    def __init__(self, message: str, file_name: Optional[str] = None):
        self.file_name = file_name
        if file_name:
            message = f"{file_name}: {message}"
        super().__init__(message)


class AIBackendError(HeraMapperError):
    """Raised when an AI backend cannot produce a schema."""

    def __init__(self, backend: str, message: str):
        self.backend = backend
        super().__init__(f"[{backend}] {message}")


class ValidationGapError(HeraMapperError):
    """An AI-returned schema is missing required envelope fields."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Schema is missing envelope fields: {', '.join(self.missing)}")


class RegistryWriteError(HeraMapperError):
    """Raised when a schema cannot be persisted to the registry."""


class InvalidTransitionError(HeraMapperError):
    """Raised when a mapping session is moved to a status out of order."""


class UnbalancedEntryError(HeraMapperError):
    """Raised when a journal entry's debits and credits do not match."""

    def __init__(self, debits: Decimal, credits: Decimal):
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Journal entry is unbalanced: debits={debits} credits={credits} "
            f"(difference {debits - credits})"
        )

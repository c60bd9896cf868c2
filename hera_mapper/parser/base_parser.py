"""Abstract base class for legacy upload parsers."""
from abc import ABC, abstractmethod
from typing import Any, Union


class LegacyDataParser(ABC):
    """Abstract base class for legacy data parsers."""

    # Value passed to StructureAnalyzer as source_format
    format_name = "unknown"

    @abstractmethod
    def parse(self, content: Union[str, bytes], source_name: str = "data") -> Any:
        """
        Parse uploaded content into raw records.

        Args:
            content: Raw file content
            source_name: Name used for the single table of flat formats

        Returns:
            A list of records or a dict of {table_name: [records]}

        Raises:
            ParseError: If content is not valid for this format
        """
        pass

    @staticmethod
    def detect_format(file_path: str) -> str:
        """Detect file format from extension."""
        return file_path.lower().rsplit(".", 1)[-1] if "." in file_path else ""

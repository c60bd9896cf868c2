"""CSV upload parser with auto-delimiter detection."""
import csv
from io import StringIO
from typing import Any, Dict, List, Optional, Union

from hera_mapper.errors import ParseError
from hera_mapper.parser.base_parser import LegacyDataParser


class CsvParser(LegacyDataParser):
    """Parse CSV files into a single table of records."""

    format_name = "csv"

    # Common delimiters
    DELIMITERS = [',', ';', '|', '\t']

    def parse(
        self,
        content: Union[str, bytes],
        source_name: str = "data",
    ) -> Dict[str, List[Dict[str, Optional[str]]]]:
        """
        Parse CSV content and return records.

        Args:
            content: CSV file content
            source_name: Table name for the returned records

        Returns:
            {source_name: [records]}; empty cells become None

        Raises:
            ParseError: If content cannot be decoded or has no header row
        """
        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ParseError(f"File is not UTF-8 encoded: {e}", source_name)

        # Auto-detect delimiter
        delimiter = self._detect_delimiter(content)

        rows = self._read_csv(content, delimiter, source_name)
        rows = [row for row in rows if any(cell.strip() for cell in row)]

        if not rows:
            raise ParseError("CSV file is empty", source_name)

        headers = [header.strip() for header in rows[0]]
        if not any(headers):
            raise ParseError("CSV header row is empty", source_name)

        records = []
        for row in rows[1:]:
            record: Dict[str, Any] = {}
            for index, header in enumerate(headers):
                if not header:
                    header = f"column_{index}"
                value = row[index].strip() if index < len(row) else ""
                record[header] = value if value else None
            records.append(record)

        return {source_name: records}

    def _detect_delimiter(self, content: str) -> str:
        """
        Auto-detect CSV delimiter.

        Returns:
            str: Most likely delimiter
        """
        # Only the header line decides
        sample = content[:1000].splitlines()[0] if content.strip() else ""

        counts = {}
        for delimiter in self.DELIMITERS:
            counts[delimiter] = sample.count(delimiter)

        best_delimiter = max(counts, key=counts.get)

        # Fallback to comma if no clear winner
        if counts[best_delimiter] == 0:
            return ','

        return best_delimiter

    def _read_csv(self, content: str, delimiter: str, source_name: str) -> List[List[str]]:
        try:
            reader = csv.reader(StringIO(content), delimiter=delimiter)
            return list(reader)
        except csv.Error as e:
            raise ParseError(f"Malformed CSV: {e}", source_name)

"""Excel upload parser with multi-sheet support."""
from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, List, Union

try:
    from openpyxl import load_workbook
    HAS_OPENPYXL = True
except ImportError:
    HAS_OPENPYXL = False

from hera_mapper.errors import ParseError
from hera_mapper.parser.base_parser import LegacyDataParser


class ExcelParser(LegacyDataParser):
    """Parse Excel workbooks, one table per sheet."""

    format_name = "excel"

    def parse(
        self,
        content: Union[str, bytes],
        source_name: str = "data",
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Parse Excel content and return records per sheet.

        Args:
            content: Workbook content (as bytes)
            source_name: File name, used in error messages

        Returns:
            {sheet_name: [records]}; sheets without data rows are kept empty

        Raises:
            ParseError: If the workbook cannot be read
            RuntimeError: If openpyxl is not installed
        """
        if not HAS_OPENPYXL:
            raise RuntimeError(
                "openpyxl is required for Excel parsing. "
                "Install with: pip install openpyxl"
            )

        if isinstance(content, str):
            raise ParseError("Excel content must be binary", source_name)

        try:
            wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
        except Exception as e:
            raise ParseError(f"Failed to parse Excel file: {e}", source_name)

        tables: Dict[str, List[Dict[str, Any]]] = {}

        for sheet_name in wb.sheetnames:
            ws = wb[sheet_name]
            rows = ws.iter_rows(values_only=True)

            header_row = next(rows, None)
            if not header_row:
                continue

            headers = [
                str(value).strip() if value is not None else f"column_{index}"
                for index, value in enumerate(header_row)
            ]

            records = []
            for row in rows:
                if row is None or all(value is None for value in row):
                    continue
                records.append({
                    header: self._cell_value(row[index] if index < len(row) else None)
                    for index, header in enumerate(headers)
                })

            tables[sheet_name] = records

        wb.close()
        return tables

    @staticmethod
    def _cell_value(value: Any) -> Any:
        """Dates become ISO strings so the analyzer types them as dates"""
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        return value

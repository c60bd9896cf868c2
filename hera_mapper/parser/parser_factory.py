"""Factory for creating the appropriate parser based on file type."""
import logging
from pathlib import Path
from typing import Any, Optional, Tuple

from hera_mapper.config import app_config
from hera_mapper.errors import ParseError
from hera_mapper.parser.base_parser import LegacyDataParser
from hera_mapper.parser.csv_parser import CsvParser
from hera_mapper.parser.excel_parser import ExcelParser
from hera_mapper.parser.json_parser import JsonParser

logger = logging.getLogger(__name__)


class ParserFactory:
    """Factory for creating upload parsers."""

    # Map extensions to parser types
    PARSERS = {
        'json': 'json',
        'csv': 'csv',
        'xlsx': 'excel',
        'xls': 'excel',
    }

    @staticmethod
    def create_parser(file_path: str) -> LegacyDataParser:
        """
        Create parser based on file extension.

        Args:
            file_path: Path or name of the uploaded file

        Returns:
            LegacyDataParser: Appropriate parser instance

        Raises:
            ValueError: If file format is not supported
        """
        ext = LegacyDataParser.detect_format(str(file_path))

        parser_type = ParserFactory.PARSERS.get(ext)
        if parser_type == 'json':
            return JsonParser()
        elif parser_type == 'csv':
            return CsvParser()
        elif parser_type == 'excel':
            return ExcelParser()

        raise ValueError(f"Unsupported upload format: {ext}")

    @staticmethod
    def parse_upload(
        file_path: str,
        max_bytes: Optional[int] = None,
    ) -> Tuple[Any, LegacyDataParser]:
        """
        Read and parse an uploaded file in one call.

        Args:
            file_path: Path to the uploaded file
            max_bytes: Upload cap (defaults to app_config.max_upload_bytes)

        Returns:
            (parsed content, parser used)

        Raises:
            ParseError: If the file is too large or not valid for its type
            ValueError: If file format is not supported
        """
        path = Path(file_path)
        max_bytes = max_bytes if max_bytes is not None else app_config.max_upload_bytes

        parser = ParserFactory.create_parser(path.name)

        size = path.stat().st_size
        if size > max_bytes:
            raise ParseError(
                f"File is {size / 1024 / 1024:.1f} MB, above the "
                f"{max_bytes / 1024 / 1024:.1f} MB upload limit",
                path.name,
            )

        content = path.read_bytes()
        logger.info(f"Parsing {path.name} ({size} bytes) as {parser.format_name}")

        return parser.parse(content, source_name=path.stem), parser

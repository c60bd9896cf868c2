"""JSON upload parser."""
import json
from typing import Any, Union

from hera_mapper.errors import ParseError
from hera_mapper.parser.base_parser import LegacyDataParser


class JsonParser(LegacyDataParser):
    """Parse JSON uploads (array of records or keyed object of arrays)."""

    format_name = "json"

    def parse(self, content: Union[str, bytes], source_name: str = "data") -> Any:
        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ParseError(f"File is not UTF-8 encoded: {e}", source_name)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}", source_name)

        if not isinstance(data, (list, dict)):
            raise ParseError("JSON root must be an array or an object", source_name)

        return data

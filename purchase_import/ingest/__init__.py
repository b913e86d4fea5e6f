from .ai_json import build_extraction_prompt, extract_with_ai, parse_ai_response
from .columns import extract_fields
from .delimited import read_csv_file, split_delimited_text
from .errors import IngestionError
from .spreadsheet import read_spreadsheet_file

__all__ = [
    "IngestionError",
    "build_extraction_prompt",
    "extract_fields",
    "extract_with_ai",
    "parse_ai_response",
    "read_csv_file",
    "read_spreadsheet_file",
    "split_delimited_text",
]

"""Journal parsing package."""

from daybook.parsing.dictionary import CategoryDictionary
from daybook.parsing.parser import RecordParser, date_from_path, parse_date_token

__all__ = [
    "CategoryDictionary",
    "RecordParser",
    "date_from_path",
    "parse_date_token",
]

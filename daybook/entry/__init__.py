"""Quick entry package."""

from daybook.entry.quick_entry import (
    EntryInputError,
    append_entry,
    format_amount,
    format_entry_line,
    journal_path_for,
    merge_entry,
    parse_entry_input,
)

__all__ = [
    "EntryInputError",
    "append_entry",
    "format_amount",
    "format_entry_line",
    "journal_path_for",
    "merge_entry",
    "parse_entry_input",
]

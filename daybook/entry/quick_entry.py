"""
Quick Entry

Appends a new bookkeeping line to today's journal document.

    input "50 lunch", keyword "cy"  ->  "- #cy 50 lunch"

Today's document is "<journals>/<YYYY-MM-DD>.md". If it exists, trailing
blank lines and bare "-" placeholder bullets are dropped before the new
line is appended. Otherwise the document is created holding just the line.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from daybook.config import LedgerConfig
from daybook.parsing import CategoryDictionary
from daybook.services.corpus import DocumentHandle, WritableCorpusInterface


ENTRY_INPUT = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)\s*(.*)$", re.DOTALL)


class EntryInputError(ValueError):
    """Quick entry input that cannot become a bookkeeping line."""
    pass


def parse_entry_input(text: str) -> tuple[Decimal, str]:
    """
    Split "<amount> [description]" into its parts.

    Raises:
        EntryInputError: Empty input, no leading number, or amount <= 0
    """
    text = text.strip()
    if not text:
        raise EntryInputError("Please enter an amount")

    match = ENTRY_INPUT.match(text)
    if not match:
        raise EntryInputError("Please enter a valid amount, for example: 50 lunch")

    try:
        amount = Decimal(match.group(1))
    except InvalidOperation:
        raise EntryInputError("Please enter a valid amount")
    if amount <= 0:
        raise EntryInputError("Please enter a valid amount")

    description = " ".join(match.group(2).split())
    return amount, description


def format_amount(amount: Decimal) -> str:
    """Plain decimal notation without trailing zeros ("50", "12.5")."""
    return format(amount.normalize(), "f")


def format_entry_line(
    config: LedgerConfig,
    keyword: str,
    amount: Decimal,
    description: str = "",
) -> str:
    line = f"- {config.marker}{keyword} {format_amount(amount)}"
    return f"{line} {description}" if description else line


def journal_path_for(config: LedgerConfig, day: date) -> str:
    name = f"{day.isoformat()}.md"
    return f"{config.journals_path}/{name}" if config.journals_path else name


def merge_entry(existing: Optional[str], line: str) -> str:
    """Append `line` to a document's text, dropping trailing placeholders."""
    if not existing:
        return line

    lines = existing.split("\n")
    while lines and lines[-1].strip() in ("", "-"):
        lines.pop()

    body = "\n".join(lines)
    return f"{body}\n{line}" if body else line


async def append_entry(
    corpus: WritableCorpusInterface,
    config: LedgerConfig,
    keyword: str,
    text: str,
    today: date,
    dictionary: Optional[CategoryDictionary] = None,
) -> tuple[DocumentHandle, str]:
    """
    Write a quick entry to today's journal document.

    Returns:
        (document, line written)

    Raises:
        EntryInputError: Unknown keyword or unusable input
        DocumentReadError / DocumentWriteError: Corpus failures
    """
    dictionary = dictionary or CategoryDictionary.from_config(config)
    canonical = dictionary.canonical(keyword)
    if canonical is None:
        raise EntryInputError(f"Unknown category keyword: {keyword}")

    amount, description = parse_entry_input(text)
    line = format_entry_line(config, canonical, amount, description)

    path = journal_path_for(config, today)
    existing = None
    handle = await corpus.get_document(path)
    if handle is not None:
        existing = await corpus.read_document(handle)

    document = await corpus.write_document(path, merge_entry(existing, line))
    return document, line

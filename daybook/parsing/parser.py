"""
Journal Line Parser

Turns one free-form journal line into a TransactionRecord.

Line convention:
    <marker><keyword> <amount>[<unit>] [description] [YYYY-MM-DD]

    - #cy 50 lunch
    - #cy100元 team dinner
    - #sr 8000 salary
    - #gw 2024-03-01 30 shoes      (backfill: recorded on another day)

CRITICAL: The parser never fails on malformed input. A line without the
marker, without a known keyword, or without a positive amount simply
yields no record.

Compiled patterns are used with search()/match() only; Python's re has
no per-pattern match position, so each evaluation is independent.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

import structlog

from daybook.config import LedgerConfig
from daybook.models.ledger import TransactionRecord
from daybook.parsing.dictionary import CategoryDictionary


logger = structlog.get_logger(__name__)

DATE_TOKEN = re.compile(r"\d{4}-\d{2}-\d{2}")
NUMBER_TOKEN = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_date_token(token: str) -> Optional[date]:
    """Parse a YYYY-MM-DD token; None if it is not a real calendar date."""
    try:
        return date.fromisoformat(token)
    except ValueError:
        return None


def date_from_path(path: str) -> Optional[date]:
    """First valid YYYY-MM-DD token in a document path, if any."""
    for match in DATE_TOKEN.finditer(path):
        parsed = parse_date_token(match.group(0))
        if parsed is not None:
            return parsed
    return None


class RecordParser:
    """
    Line-level record parser.

    Built once per configuration; holds no state between calls.
    """

    def __init__(
        self,
        config: LedgerConfig,
        dictionary: Optional[CategoryDictionary] = None,
        today: Callable[[], date] = date.today,
    ):
        self._marker = config.marker
        self._units = tuple(sorted(config.currency_units, key=len, reverse=True))
        self._dictionary = dictionary or CategoryDictionary.from_config(config)
        self._today = today

        alternation = self._dictionary.alternation()
        self._line_pattern: Optional[re.Pattern] = None
        if alternation:
            self._line_pattern = re.compile(
                rf"{re.escape(self._marker)}\s*({alternation})\s*(.+)",
                re.IGNORECASE,
            )

    @property
    def marker(self) -> str:
        return self._marker

    @property
    def dictionary(self) -> CategoryDictionary:
        return self._dictionary

    def parse_line(self, line: str, context_date: date) -> Optional[TransactionRecord]:
        """
        Parse a single line.

        Args:
            line: Raw text line
            context_date: Date implied by the containing document

        Returns:
            The record, or None if the line carries no transaction
        """
        if self._marker not in line or self._line_pattern is None:
            return None

        match = self._line_pattern.search(line)
        if not match:
            return None

        keyword = self._dictionary.canonical(match.group(1)) or match.group(1)
        remainder = match.group(2)

        amount_span = self._find_amount(remainder)
        if amount_span is None:
            return None
        start, end = amount_span

        try:
            amount = Decimal(remainder[start:end])
        except InvalidOperation:
            return None
        if amount <= 0:
            return None

        for unit in self._units:
            if remainder.startswith(unit, end):
                end += len(unit)
                break

        left = remainder[:start].strip()
        right = remainder[end:].strip()
        description = " ".join(part for part in (left, right) if part)

        record_date = context_date
        date_match = DATE_TOKEN.search(description)
        if date_match:
            embedded = parse_date_token(date_match.group(0))
            if embedded is not None:
                record_date = embedded
                if embedded != context_date:
                    logger.debug(
                        "backfill_date_detected",
                        record_date=embedded.isoformat(),
                        source_date=context_date.isoformat(),
                    )

        return TransactionRecord(
            date=record_date,
            source_date=context_date,
            keyword=keyword,
            category=self._dictionary.resolve(keyword),
            amount=amount,
            is_income=self._dictionary.is_income(keyword),
            description=description,
            raw_text=line,
        )

    def parse_document(self, content: str, path: str) -> list[TransactionRecord]:
        """Parse every line of a document; lines are independent."""
        if self._marker not in content:
            return []

        context_date = self.context_date_for(path)
        records = []
        for line in content.splitlines():
            record = self.parse_line(line, context_date)
            if record is not None:
                records.append(record)
        return records

    def context_date_for(self, path: str) -> date:
        """Date implied by a document path; today if the path has none."""
        return date_from_path(path) or self._today()

    def _find_amount(self, text: str) -> Optional[tuple[int, int]]:
        """Span of the first numeric token that is not part of a date."""
        date_spans = [m.span() for m in DATE_TOKEN.finditer(text)]
        for match in NUMBER_TOKEN.finditer(text):
            start, end = match.span()
            if any(start < d_end and end > d_start for d_start, d_end in date_spans):
                continue
            return start, end
        return None

"""
Category Dictionary

Ordered keyword -> category mapping used by the parser and the budget
evaluator.

DESIGN DECISION: Keywords are kept longest-first. The parser builds its
alternation from this order, so a keyword is never shadowed by a shorter
keyword that happens to be its prefix ("cy" is tried before "c").
Lookups are case-insensitive and return the configured spelling.
"""

import re
from typing import Iterator, Optional

from daybook.config import LedgerConfig


class CategoryDictionary:
    """
    Immutable view over the configured keywords.
    """

    def __init__(
        self,
        categories: dict[str, str],
        income_keyword: str = "sr",
        uncategorized_label: str = "uncategorized",
    ):
        self._categories = dict(categories)
        self._income_keyword = income_keyword
        self._uncategorized_label = uncategorized_label
        self._ordered = sorted(self._categories, key=len, reverse=True)
        self._canonical = {}
        for keyword in self._ordered:
            # First spelling wins when two keywords differ only by case
            self._canonical.setdefault(keyword.casefold(), keyword)

    @classmethod
    def from_config(cls, config: LedgerConfig) -> "CategoryDictionary":
        return cls(
            categories=config.categories,
            income_keyword=config.income_keyword,
            uncategorized_label=config.uncategorized_label,
        )

    def __len__(self) -> int:
        return len(self._categories)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordered)

    def __contains__(self, keyword: object) -> bool:
        return isinstance(keyword, str) and keyword.casefold() in self._canonical

    @property
    def keywords_longest_first(self) -> list[str]:
        return list(self._ordered)

    @property
    def income_keyword(self) -> str:
        return self._income_keyword

    @property
    def uncategorized_label(self) -> str:
        return self._uncategorized_label

    def alternation(self) -> str:
        """
        Regex alternation of every keyword, longest first, escaped.

        Returns an empty string for an empty dictionary.
        """
        return "|".join(re.escape(k) for k in self._ordered)

    def canonical(self, keyword: str) -> Optional[str]:
        """Configured spelling of `keyword`, or None if unknown."""
        return self._canonical.get(keyword.casefold())

    def resolve(self, keyword: str) -> str:
        """Display name for `keyword`; the uncategorized label if unknown."""
        canonical = self.canonical(keyword)
        if canonical is None:
            return self._uncategorized_label
        return self._categories[canonical]

    def lookup(self, keyword: str) -> Optional[str]:
        """Display name for `keyword`, or None if unknown."""
        canonical = self.canonical(keyword)
        return self._categories[canonical] if canonical is not None else None

    def is_income(self, keyword: str) -> bool:
        return keyword.casefold() == self._income_keyword.casefold()

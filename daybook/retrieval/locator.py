"""
Document Locator

Narrows the journal folder down to the documents that actually hold
bookkeeping lines. Three strategies are tried in order:

TIER 1 - ENGINE:
- Ask the optional search facility for "<marker><keyword>" per keyword
- Union the hits that fall under the corpus root
- Unavailable facility or no hits -> fall through

TIER 2 - PREFILTERED SCAN:
- Only documents named like a date ("2024-03-10.md", one date token
  ending the name) are candidates
- Each candidate's text is tested against
  "<marker>\\s*(<keywords>)\\s*.*?[\\d.]+"
- Candidates are read 50 at a time
- An empty result from a working scan is final

TIER 3 - FULL TRAVERSAL:
- Only when tiers 1 and 2 both failed outright
- Every document under the root is read (10 at a time) and kept if it
  contains the marker at all

A document that cannot be read is logged and skipped; it never aborts a
batch or a tier.
"""

import re
from typing import Optional, Sequence
from uuid import UUID

from pydantic import BaseModel, Field

from daybook.audit import AuditLogger
from daybook.models.ledger import SearchTier
from daybook.parsing.parser import DATE_TOKEN
from daybook.retrieval.batching import run_in_batches
from daybook.services.corpus import (
    CorpusError,
    CorpusInterface,
    DocumentHandle,
    SearchFacilityInterface,
    SearchUnavailableError,
)


class LocatorError(Exception):
    """Every retrieval tier failed."""
    pass


class LocatorResult(BaseModel):
    """Documents located, and which tier located them."""

    documents: frozenset[DocumentHandle] = Field(default_factory=frozenset)
    tier: SearchTier
    failed_tiers: list[SearchTier] = Field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return sorted(d.path for d in self.documents)


def is_dated_identity(identity: str) -> bool:
    """
    True if a document name holds exactly one YYYY-MM-DD token and the
    name (without extension) ends with it.
    """
    stem = identity.rsplit(".", 1)[0] if "." in identity else identity
    tokens = DATE_TOKEN.findall(identity)
    return len(tokens) == 1 and stem.endswith(tokens[0])


def is_within(path: str, root: str) -> bool:
    root = root.strip("/")
    if not root:
        return True
    return path == root or path.startswith(f"{root}/")


class DocumentLocator:
    """
    Tiered document retrieval.

    Stateless between calls; build a new one when the configuration changes.
    """

    def __init__(
        self,
        corpus: CorpusInterface,
        marker: str,
        search: Optional[SearchFacilityInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        scan_batch_size: int = 50,
        traversal_batch_size: int = 10,
    ):
        self._corpus = corpus
        self._marker = marker
        self._search = search
        self._audit = audit_logger or AuditLogger()
        self._scan_batch_size = scan_batch_size
        self._traversal_batch_size = traversal_batch_size

    def build_scan_pattern(self, keywords: Sequence[str]) -> str:
        """Pattern source for the prefiltered scan (keywords longest first)."""
        ordered = sorted(keywords, key=len, reverse=True)
        alternation = "|".join(re.escape(k) for k in ordered)
        return rf"{re.escape(self._marker)}\s*({alternation})\s*.*?[\d.]+"

    async def locate(
        self,
        keywords: Sequence[str],
        corpus_root: str,
        correlation_id: Optional[UUID] = None,
    ) -> LocatorResult:
        """
        Find the documents likely to contain transactions.

        Raises:
            LocatorError: If tiers 2 and 3 both fail outright
        """
        failed: list[SearchTier] = []

        try:
            documents = await self._search_engine(keywords, corpus_root, correlation_id)
        except (SearchUnavailableError, CorpusError) as e:
            failed.append(SearchTier.ENGINE)
            await self._audit.log_tier_failed(
                tier=SearchTier.ENGINE.value,
                error_message=str(e),
                correlation_id=correlation_id,
            )
        else:
            if documents:
                return await self._selected(SearchTier.ENGINE, documents, failed, correlation_id)

        try:
            documents = await self._prefiltered_scan(keywords, corpus_root, correlation_id)
        except CorpusError as e:
            failed.append(SearchTier.PREFILTERED_SCAN)
            await self._audit.log_tier_failed(
                tier=SearchTier.PREFILTERED_SCAN.value,
                error_message=str(e),
                correlation_id=correlation_id,
            )
        else:
            return await self._selected(
                SearchTier.PREFILTERED_SCAN, documents, failed, correlation_id
            )

        try:
            documents = await self._full_traversal(corpus_root, correlation_id)
        except CorpusError as e:
            await self._audit.log_tier_failed(
                tier=SearchTier.FULL_TRAVERSAL.value,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise LocatorError(f"All retrieval tiers failed: {e}") from e
        return await self._selected(SearchTier.FULL_TRAVERSAL, documents, failed, correlation_id)

    async def _selected(
        self,
        tier: SearchTier,
        documents: set[DocumentHandle],
        failed: list[SearchTier],
        correlation_id: Optional[UUID],
    ) -> LocatorResult:
        await self._audit.log_tier_selected(
            tier=tier.value,
            document_count=len(documents),
            correlation_id=correlation_id,
        )
        return LocatorResult(documents=frozenset(documents), tier=tier, failed_tiers=failed)

    async def _search_engine(
        self,
        keywords: Sequence[str],
        corpus_root: str,
        correlation_id: Optional[UUID],
    ) -> set[DocumentHandle]:
        """
        Tier 1. Raises SearchUnavailableError when there is no facility or
        every query failed.
        """
        if self._search is None:
            raise SearchUnavailableError("No search facility configured")

        matches: set[DocumentHandle] = set()
        failures = 0
        for keyword in keywords:
            term = f"{self._marker}{keyword}"
            try:
                found = await self._query(term, corpus_root)
            except Exception as e:
                # A facility we don't own may fail in any way, hits included
                failures += 1
                await self._audit.log_tier_failed(
                    tier=SearchTier.ENGINE.value,
                    error_message=f"{term}: {e}",
                    correlation_id=correlation_id,
                )
                continue
            matches.update(found)

        if keywords and failures == len(keywords):
            raise SearchUnavailableError("Every search query failed")
        return matches

    async def _query(self, term: str, corpus_root: str) -> set[DocumentHandle]:
        """Documents under `corpus_root` that the facility reports for `term`."""
        found: set[DocumentHandle] = set()
        for hit in await self._search.search(term, corpus_root):
            if not is_within(hit.document_path, corpus_root):
                continue
            handle = await self._corpus.get_document(hit.document_path)
            if handle is not None:
                found.add(handle)
        return found

    async def _prefiltered_scan(
        self,
        keywords: Sequence[str],
        corpus_root: str,
        correlation_id: Optional[UUID],
    ) -> set[DocumentHandle]:
        """Tier 2. Raises CorpusError only if the listing fails."""
        all_documents = await self._corpus.list_documents(corpus_root)
        candidates = [d for d in all_documents if is_dated_identity(d.identity)]
        if not keywords or not candidates:
            return set()

        source = self.build_scan_pattern(keywords)

        async def check(handle: DocumentHandle) -> Optional[DocumentHandle]:
            try:
                content = await self._corpus.read_document(handle)
            except Exception as e:
                await self._audit.log_document_read_failed(
                    path=handle.path,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                return None
            # Fresh pattern per document
            if re.compile(source, re.IGNORECASE).search(content):
                return handle
            return None

        results = await run_in_batches(candidates, check, self._scan_batch_size)
        return {h for h in results if h is not None}

    async def _full_traversal(
        self,
        corpus_root: str,
        correlation_id: Optional[UUID],
    ) -> set[DocumentHandle]:
        """Tier 3. Raises CorpusError if the listing fails."""
        all_documents = await self._corpus.list_documents(corpus_root)

        async def check(handle: DocumentHandle) -> Optional[DocumentHandle]:
            try:
                content = await self._corpus.read_document(handle)
            except Exception as e:
                await self._audit.log_document_read_failed(
                    path=handle.path,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                return None
            return handle if self._marker in content else None

        results = await run_in_batches(all_documents, check, self._traversal_batch_size)
        return {h for h in results if h is not None}

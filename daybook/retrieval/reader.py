"""
Corpus Reader

Reads located documents in bounded batches and runs every line through
the parser. A document that cannot be read contributes no records.
"""

from typing import Iterable, Optional
from uuid import UUID

from daybook.audit import AuditLogger
from daybook.models.ledger import TransactionRecord
from daybook.parsing import RecordParser
from daybook.retrieval.batching import run_in_batches
from daybook.services.corpus import CorpusInterface, DocumentHandle


def sort_newest_first(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Order by effective date, newest first; stable for equal dates."""
    return sorted(records, key=lambda r: r.date, reverse=True)


class CorpusReader:
    """
    Streams document contents into the parser and collects the records.
    """

    def __init__(
        self,
        corpus: CorpusInterface,
        parser: RecordParser,
        audit_logger: Optional[AuditLogger] = None,
        batch_size: int = 50,
    ):
        self._corpus = corpus
        self._parser = parser
        self._audit = audit_logger or AuditLogger()
        self._batch_size = batch_size

    async def read_records(
        self,
        documents: Iterable[DocumentHandle],
        correlation_id: Optional[UUID] = None,
    ) -> list[TransactionRecord]:
        """
        Parse every document and return all records, newest first.

        Documents are read in path order so equal-date records keep a
        deterministic order.
        """
        ordered = sorted(documents, key=lambda d: d.path)

        async def read_one(handle: DocumentHandle) -> list[TransactionRecord]:
            try:
                content = await self._corpus.read_document(handle)
            except Exception as e:
                await self._audit.log_document_read_failed(
                    path=handle.path,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                return []
            return self._parser.parse_document(content, handle.path)

        per_document = await run_in_batches(ordered, read_one, self._batch_size)

        records: list[TransactionRecord] = []
        for document_records in per_document:
            records.extend(document_records)
        return sort_newest_first(records)

"""Ingestion service.

Splits each document's text into chunks, embeds all chunks of a document in
one gateway call, and upserts the resulting vectors into the RAG backend.
Documents move through RECEIVED → CHUNKING → EMBEDDING → UPSERTING → DONE;
any document may drop to FAILED without halting its siblings.
"""

import asyncio
import weakref
from enum import Enum

from services.ingestion.TextChunker import build_chunks, validate_window
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.VectorPoint import IndexedVector, VectorPayload, make_vector_id
from shared.errors.exceptions import DimensionMismatchError, ProviderError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import Document
from shared.models.ingest import IngestFailure, IngestResult


class IngestStage(str, Enum):
    RECEIVED = "RECEIVED"
    CHUNKING = "CHUNKING"
    EMBEDDING = "EMBEDDING"
    UPSERTING = "UPSERTING"
    DONE = "DONE"
    FAILED = "FAILED"


class IngestionService:
    """Orchestrates Chunker → Embed client → RAG client for a batch of documents."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        embed_client: EmbedClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._embed_client = embed_client
        # one writer per document id at a time; entries vanish once no ingest holds them
        self._document_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

        self.chunk_size = int(helper_config.get_number_val("CHUNK_SIZE", default=1000))
        self.chunk_overlap = int(helper_config.get_number_val("CHUNK_OVERLAP", default=100))
        self.concurrency = int(helper_config.get_number_val("INGEST_CONCURRENCY", default=5))
        validate_window(self.chunk_size, self.chunk_overlap)
        if self.concurrency <= 0:
            raise ValidationError(f"INGEST_CONCURRENCY must be positive, got {self.concurrency}.")

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def _validate_batch(self, documents: list[Document]) -> None:
        """Reject batches that must not reach any backend.

        Raises:
            ValidationError: If the batch is empty, a document has no id,
                or two documents share an id.
        """
        if not documents:
            raise ValidationError("At least one document is required for ingestion.")
        seen: set[str] = set()
        for doc in documents:
            if not doc.id or not doc.id.strip():
                raise ValidationError("Every document needs a non-empty id.")
            if doc.id in seen:
                raise ValidationError(f"Duplicate document id in batch: {doc.id!r}.")
            seen.add(doc.id)

    ##########################################
    ############### CORE INGEST ##############
    ##########################################

    async def do_ingest(self, documents: list[Document]) -> IngestResult:
        """Ingest a batch of documents and report per-document outcomes.

        Args:
            documents (list[Document]): The documents to ingest.

        Returns:
            IngestResult: Counts of ingested and failed documents plus failure reasons.

        Raises:
            ValidationError: If the batch is malformed. No network call is made.
            DimensionMismatchError: If the embedding and index dimensions disagree.
        """
        self._validate_batch(documents)
        self.logging.info("Ingesting %d documents...", len(documents))

        # process documents concurrently with bounded parallelism
        sem = asyncio.Semaphore(self.concurrency)
        results = await asyncio.gather(
            *[self._ingest_document(doc, sem) for doc in documents],
            return_exceptions=True,
        )

        report = IngestResult()
        for doc, outcome in zip(documents, results):
            if isinstance(outcome, DimensionMismatchError):
                # configuration error, not a per-document one
                raise outcome
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, Exception):
                self.logging.error("Unexpected error ingesting document id=%s: %r", doc.id, outcome)
                outcome = IngestFailure(document_id=doc.id, reason=f"{IngestStage.FAILED.value}: {outcome}")
            if outcome is None:
                report.ingested_count += 1
            else:
                report.failed_count += 1
                report.failures.append(outcome)

        self.logging.info(
            "Ingestion complete: %d ingested, %d failed.", report.ingested_count, report.failed_count
        )
        return report

    ##########################################
    ############ DOCUMENT INGEST #############
    ##########################################

    async def _ingest_document(self, doc: Document, sem: asyncio.Semaphore) -> IngestFailure | None:
        """Chunk, embed and upsert a single document.

        Args:
            doc (Document): The document to ingest.
            sem (asyncio.Semaphore): Concurrency limiter.

        Returns:
            IngestFailure | None: None on success, otherwise the failure with its reason.

        Raises:
            DimensionMismatchError: Propagated to abort the batch.
        """
        async with sem:
            stage = IngestStage.CHUNKING
            chunks = build_chunks(doc, self.chunk_size, self.chunk_overlap)
            if not chunks:
                self.logging.info("Skipping document id=%s ('%s'): no content.", doc.id, doc.title)
                return self._fail(doc, stage, "no content")

            stage = IngestStage.EMBEDDING
            try:
                # one gateway call for all chunks of this document
                vectors = await self._embed_client.do_embed([chunk.text for chunk in chunks])
            except ProviderError as exc:
                return self._fail(doc, stage, str(exc))

            stage = IngestStage.UPSERTING
            points = [
                IndexedVector(
                    vector_id=make_vector_id(doc.id, chunk.sequence_index),
                    embedding=vector,
                    payload=VectorPayload(
                        document_id=doc.id,
                        sequence_index=chunk.sequence_index,
                        chunk_text=chunk.text,
                        title=doc.title,
                        source=doc.source,
                        published_at=doc.published_at,
                        namespace=doc.namespace,
                    ),
                )
                for chunk, vector in zip(chunks, vectors)
            ]
            async with self._document_lock(doc.id):
                try:
                    upsert_result = await self._rag_client.do_upsert(points)
                except ProviderError as exc:
                    return self._fail(doc, stage, str(exc))
                if upsert_result.failures:
                    rejected = ", ".join(f.vector_id for f in upsert_result.failures)
                    return self._fail(
                        doc,
                        stage,
                        f"{len(upsert_result.failures)} of {len(points)} chunks rejected ({rejected}): {upsert_result.failures[0].reason}",
                    )

                # drop chunks left over from a previous, longer version of this document
                try:
                    await self._rag_client.do_delete_document(doc.id, from_index=len(points))
                except ProviderError as exc:
                    self.logging.warning("Stale chunk cleanup failed for document id=%s: %s", doc.id, exc)

            self.logging.info(
                "Ingested document id=%s ('%s'): %d chunks upserted.", doc.id, doc.title, upsert_result.upserted_count
            )
            return None

    def _document_lock(self, document_id: str) -> asyncio.Lock:
        """Lock serializing the upsert and stale-chunk cleanup of one document.

        Without it, a concurrent ingest of a shorter version could delete the
        tail another run has just written, leaving a mix of both versions.
        """
        lock = self._document_locks.get(document_id)
        if lock is None:
            lock = asyncio.Lock()
            self._document_locks[document_id] = lock
        return lock

    def _fail(self, doc: Document, stage: IngestStage, reason: str) -> IngestFailure:
        self.logging.error("Ingestion of document id=%s failed during %s: %s", doc.id, stage.value, reason)
        return IngestFailure(document_id=doc.id, reason=f"{stage.value}: {reason}")

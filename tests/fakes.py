"""In-memory stand-ins for the backend clients.

They mirror the public coroutine surface of the real clients (do_embed,
do_upsert, do_query, do_generate, ...) and count calls so tests can assert
which stages ran.
"""
import asyncio
import math
import re
import zlib

from shared.clients.rag.models.Match import RetrievedMatch, UpsertFailure, UpsertResult
from shared.clients.rag.models.VectorPoint import IndexedVector
from shared.errors.exceptions import (
    CacheError,
    DimensionMismatchError,
    EmbeddingProviderError,
    LogError,
    VectorStoreError,
)

_RE_WORD = re.compile(r"[a-z0-9]+")


def embed_text(text: str, dimension: int) -> list[float]:
    """Deterministic bag-of-words embedding: each word adds weight to one bucket."""
    vector = [0.0] * dimension
    vector[0] = 0.1
    for word in _RE_WORD.findall(text.lower()):
        vector[zlib.crc32(word.encode("utf-8")) % dimension] += 1.0
    return vector


def cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeEmbedClient:
    def __init__(self, dimension: int, output_dimension: int | None = None):
        self.dimension = dimension
        # lets tests simulate a model that returns vectors of the wrong size
        self.output_dimension = output_dimension or dimension
        self.calls: list[list[str]] = []
        self.fail_on: set[str] = set()
        self.error: Exception | None = None

    def get_dimension(self) -> int:
        return self.dimension

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        texts = [texts] if isinstance(texts, str) else texts
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        if any(marker in text for text in texts for marker in self.fail_on):
            raise EmbeddingProviderError("embedding quota exceeded", status_code=429)
        return [embed_text(text, self.output_dimension) for text in texts]


class FakeRAGClient:
    def __init__(self, vector_size: int):
        self.vector_size = vector_size
        self.points: dict[str, IndexedVector] = {}
        self.upsert_calls = 0
        self.query_calls = 0
        self.delete_calls: list[tuple[str, int]] = []
        self.fail_upsert_for: set[str] = set()
        self.reject_vector_ids: set[str] = set()
        self.query_error: Exception | None = None
        # extra event-loop turns spent inside writes, so tests can interleave writers
        self.upsert_yields_per_vector = 0
        self.delete_yields = 0

    async def do_upsert(self, vectors: list[IndexedVector]) -> UpsertResult:
        for vector in vectors:
            if len(vector.embedding) != self.vector_size:
                raise DimensionMismatchError(expected=self.vector_size, actual=len(vector.embedding))
        for _ in range(self.upsert_yields_per_vector * len(vectors)):
            await asyncio.sleep(0)
        self.upsert_calls += 1
        if any(v.payload.document_id in self.fail_upsert_for for v in vectors):
            raise VectorStoreError("vector store unavailable", status_code=503)

        result = UpsertResult()
        for vector in vectors:
            if vector.vector_id in self.reject_vector_ids:
                result.failures.append(UpsertFailure(vector_id=vector.vector_id, reason="payload too large"))
                continue
            self.points[vector.vector_id] = vector
            result.upserted_count += 1
        return result

    async def do_query(self, embedding: list[float], top_k: int, namespace: str | None = None) -> list[RetrievedMatch]:
        self.query_calls += 1
        if self.query_error is not None:
            raise self.query_error
        if len(embedding) != self.vector_size:
            raise DimensionMismatchError(expected=self.vector_size, actual=len(embedding))
        matches = [
            RetrievedMatch(vector_id=point.vector_id, score=cosine(embedding, point.embedding), payload=point.payload)
            for point in self.points.values()
            if namespace is None or point.payload.namespace == namespace
        ]
        matches.sort(key=lambda m: (-m.score, m.vector_id))
        return matches[:top_k]

    async def do_delete_document(self, document_id: str, from_index: int = 0) -> None:
        self.delete_calls.append((document_id, from_index))
        for _ in range(self.delete_yields):
            await asyncio.sleep(0)
        stale = [
            vector_id
            for vector_id, point in self.points.items()
            if point.payload.document_id == document_id and point.payload.sequence_index >= from_index
        ]
        for vector_id in stale:
            del self.points[vector_id]

    def chunks_of(self, document_id: str) -> list[IndexedVector]:
        return sorted(
            (p for p in self.points.values() if p.payload.document_id == document_id),
            key=lambda p: p.payload.sequence_index,
        )


class FakeLLMClient:
    def __init__(self, answer: str = "AI helps doctors read scans faster."):
        self.answer = answer
        self.prompts: list[str] = []
        self.error: Exception | None = None

    async def do_generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeCacheClient:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail = False

    async def do_get(self, key: str) -> str | None:
        if self.fail:
            raise CacheError("cache unreachable", timed_out=True)
        return self.store.get(key)

    async def do_set(self, key: str, value: str, ttl: int | None = None) -> None:
        if self.fail:
            raise CacheError("cache unreachable", timed_out=True)
        self.store[key] = value
        self.ttls[key] = ttl

    async def do_delete_prefix(self, prefix: str) -> int:
        if self.fail:
            raise CacheError("cache unreachable", timed_out=True)
        keys = [key for key in self.store if key.startswith(prefix)]
        for key in keys:
            del self.store[key]
        return len(keys)


class FakeInteractionClient:
    def __init__(self):
        self.records = []
        self.fail = False

    async def do_append(self, interaction) -> None:
        if self.fail:
            raise LogError("mongo down")
        self.records.append(interaction)

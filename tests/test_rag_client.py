import json

import httpx
import pytest

from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.rag.models.VectorPoint import IndexedVector, VectorPayload, make_vector_id
from shared.clients.rag.qdrant.RAGClientQdrant import RAGClientQdrant
from shared.errors.exceptions import DimensionMismatchError, VectorStoreError

DIMENSION = 8


def make_vector(document_id: str, index: int, dimension: int = DIMENSION, namespace: str | None = None) -> IndexedVector:
    return IndexedVector(
        vector_id=make_vector_id(document_id, index),
        embedding=[0.5] * dimension,
        payload=VectorPayload(
            document_id=document_id,
            sequence_index=index,
            chunk_text=f"chunk {index} of {document_id}",
            title=f"Article {document_id}",
            source="Tech News",
            published_at="2025-01-15T10:00:00Z",
            namespace=namespace,
        ),
    )


def search_hit(point_id: str, score: float, title: str = "Article") -> dict:
    return {
        "id": point_id,
        "score": score,
        "payload": {
            "document_id": "1",
            "sequence_index": 0,
            "chunk_text": "text",
            "title": title,
            "source": "Tech News",
            "published_at": "2025-01-15T10:00:00Z",
        },
    }


class Recorder:
    """MockTransport handler that records requests and answers from a route table."""

    def __init__(self, routes: dict | None = None):
        self.requests: list[httpx.Request] = []
        self.routes = routes or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        route = self.routes.get(key)
        if callable(route):
            return route(request)
        if route is not None:
            return httpx.Response(200, json=route)
        return httpx.Response(200, json={"result": {}, "status": "ok"})


@pytest.fixture
def make_client(helper_config):
    async def _make(recorder: Recorder) -> RAGClientQdrant:
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(recorder))
        return client

    return _make


class TestVectorIds:
    def test_ids_are_deterministic_and_distinct(self):
        assert make_vector_id("1", 0) == make_vector_id("1", 0)
        assert make_vector_id("1", 0) != make_vector_id("1", 1)
        assert make_vector_id("1", 10) != make_vector_id("11", 0)


class TestUpsert:
    async def test_upsert_payload(self, make_client):
        recorder = Recorder()
        client = await make_client(recorder)

        result = await client.do_upsert([make_vector("1", 0), make_vector("1", 1)])

        assert result.upserted_count == 2
        assert result.failures == []
        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/collections/news/points"
        assert request.url.params["wait"] == "true"
        points = json.loads(request.content)["points"]
        assert [p["id"] for p in points] == [make_vector_id("1", 0), make_vector_id("1", 1)]
        assert points[1]["payload"]["sequence_index"] == 1
        assert points[1]["payload"]["title"] == "Article 1"

    async def test_dimension_checked_before_any_request(self, make_client):
        recorder = Recorder()
        client = await make_client(recorder)

        with pytest.raises(DimensionMismatchError):
            await client.do_upsert([make_vector("1", 0), make_vector("1", 1, dimension=4)])
        assert recorder.requests == []

    async def test_failed_batch_is_reported_per_vector(self, env, make_client):
        env.setenv("RAG_UPSERT_BATCH_SIZE", "2")
        calls = {"n": 0}

        def points_route(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 2:
                return httpx.Response(500, json={"status": {"error": "disk full"}})
            return httpx.Response(200, json={"result": {"status": "completed"}})

        recorder = Recorder({("PUT", "/collections/news/points"): points_route})
        client = await make_client(recorder)
        vectors = [make_vector("1", i) for i in range(3)]

        result = await client.do_upsert(vectors)

        assert result.upserted_count == 2
        assert [f.vector_id for f in result.failures] == [vectors[2].vector_id]
        assert len(recorder.requests) == 2


class TestQuery:
    async def test_sorted_by_score_then_vector_id_and_truncated(self, make_client):
        hits = [search_hit("b", 0.5), search_hit("c", 0.9), search_hit("a", 0.5), search_hit("d", 0.1)]
        recorder = Recorder({("POST", "/collections/news/points/search"): {"result": hits}})
        client = await make_client(recorder)

        matches = await client.do_query([0.1] * DIMENSION, top_k=3)

        assert [m.vector_id for m in matches] == ["c", "a", "b"]
        body = json.loads(recorder.requests[0].content)
        assert body["limit"] == 3
        assert body["with_payload"] is True
        assert "filter" not in body

    async def test_fewer_points_than_top_k(self, make_client):
        recorder = Recorder({("POST", "/collections/news/points/search"): {"result": [search_hit("a", 0.7)]}})
        client = await make_client(recorder)

        matches = await client.do_query([0.1] * DIMENSION, top_k=5)

        assert len(matches) == 1
        assert matches[0].payload.title == "Article"

    async def test_namespace_filter(self, make_client):
        recorder = Recorder({("POST", "/collections/news/points/search"): {"result": []}})
        client = await make_client(recorder)

        await client.do_query([0.1] * DIMENSION, top_k=5, namespace="health")

        body = json.loads(recorder.requests[0].content)
        assert body["filter"] == {"must": [{"key": "namespace", "match": {"value": "health"}}]}

    async def test_non_positive_top_k(self, make_client):
        recorder = Recorder()
        client = await make_client(recorder)

        with pytest.raises(ValueError):
            await client.do_query([0.1] * DIMENSION, top_k=0)
        assert recorder.requests == []

    async def test_query_dimension_mismatch(self, make_client):
        recorder = Recorder()
        client = await make_client(recorder)

        with pytest.raises(DimensionMismatchError):
            await client.do_query([0.1] * 3, top_k=5)
        assert recorder.requests == []

    async def test_invalid_payload(self, make_client):
        recorder = Recorder({("POST", "/collections/news/points/search"): {"result": [{"id": "x", "score": 0.3, "payload": {}}]}})
        client = await make_client(recorder)

        with pytest.raises(VectorStoreError):
            await client.do_query([0.1] * DIMENSION, top_k=5)

    async def test_timeout(self, make_client):
        def search(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = await make_client(Recorder({("POST", "/collections/news/points/search"): search}))

        with pytest.raises(VectorStoreError) as exc_info:
            await client.do_query([0.1] * DIMENSION, top_k=5)
        assert exc_info.value.timed_out is True


class TestCollection:
    async def test_create_when_missing(self, make_client):
        recorder = Recorder({("GET", "/collections/news/exists"): {"result": {"exists": False}}})
        client = await make_client(recorder)

        assert await client.do_existence_check() is False
        await client.do_create_collection()

        create = recorder.requests[1]
        assert create.method == "PUT"
        assert create.url.path == "/collections/news"
        assert json.loads(create.content) == {"vectors": {"size": DIMENSION, "distance": "Cosine"}}

    async def test_fetch_vector_size(self, make_client):
        info = {"result": {"config": {"params": {"vectors": {"size": 1536, "distance": "Cosine"}}}}}
        client = await make_client(Recorder({("GET", "/collections/news"): info}))

        assert await client.do_fetch_vector_size() == 1536

    async def test_delete_document_tail(self, make_client):
        recorder = Recorder()
        client = await make_client(recorder)

        await client.do_delete_document("1", from_index=3)

        body = json.loads(recorder.requests[0].content)
        assert recorder.requests[0].url.path == "/collections/news/points/delete"
        assert body == {
            "filter": {
                "must": [
                    {"key": "document_id", "match": {"value": "1"}},
                    {"key": "sequence_index", "range": {"gte": 3}},
                ]
            }
        }

    async def test_api_key_header(self, env, helper_config):
        env.setenv("RAG_QDRANT_API_KEY", "secret")
        recorder = Recorder()
        client = RAGClientQdrant(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(recorder))

        await client.do_healthcheck()

        assert recorder.requests[0].headers["api-key"] == "secret"
        assert recorder.requests[0].url.path == "/healthz"

    def test_vector_size_defaults_to_embed_dimension(self, helper_config):
        client = RAGClientManager(helper_config=helper_config).get_client()

        assert isinstance(client, RAGClientQdrant)
        assert client.vector_size == DIMENSION

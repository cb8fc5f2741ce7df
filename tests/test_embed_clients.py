import json

import httpx
import pytest

from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.embed.ollama.EmbedClientOllama import EmbedClientOllama
from shared.clients.embed.openai.EmbedClientOpenai import EmbedClientOpenai
from shared.errors.exceptions import DimensionMismatchError, EmbeddingProviderError

DIMENSION = 8


def vector_for(text: str) -> list[float]:
    """Encodes the numeric suffix of "text-N" so tests can check ordering."""
    return [float(text.split("-")[-1])] * DIMENSION


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def ollama_handler(requests_seen):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests_seen.append(body)
        return httpx.Response(200, json={"embeddings": [vector_for(t) for t in body["input"]]})

    return handler


class TestEmbedClientOllama:
    """Wire behaviour of the Ollama embedding client."""

    async def test_batches_and_preserves_order(self, env, helper_config, ollama_handler, requests_seen):
        env.setenv("EMBED_BATCH_SIZE", "2")
        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(ollama_handler))

        texts = [f"text-{i}" for i in range(5)]
        vectors = await client.do_embed(texts)

        assert [v[0] for v in vectors] == [0.0, 1.0, 2.0, 3.0, 4.0]
        assert [len(r["input"]) for r in requests_seen] == [2, 2, 1]
        assert requests_seen[0]["model"] == "nomic-embed-text"
        await client.close()

    async def test_single_string_input(self, helper_config, ollama_handler):
        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(ollama_handler))

        vectors = await client.do_embed("text-7")

        assert vectors == [[7.0] * DIMENSION]

    async def test_empty_input_makes_no_request(self, helper_config, ollama_handler, requests_seen):
        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(ollama_handler))

        assert await client.do_embed([]) == []
        assert requests_seen == []

    async def test_wrong_dimension_raises(self, helper_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3, 0.4]]})

        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        with pytest.raises(DimensionMismatchError) as exc_info:
            await client.do_embed(["text-1"])
        assert exc_info.value.expected == DIMENSION
        assert exc_info.value.actual == 4

    async def test_vector_count_mismatch_is_provider_error(self, helper_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"embeddings": [[0.0] * DIMENSION]})

        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        with pytest.raises(EmbeddingProviderError):
            await client.do_embed(["text-1", "text-2"])

    async def test_timeout_is_flagged(self, helper_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        with pytest.raises(EmbeddingProviderError) as exc_info:
            await client.do_embed(["text-1"])
        assert exc_info.value.timed_out is True
        assert exc_info.value.provider == "embedding"

    async def test_quota_error_is_retryable(self, helper_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": "rate limited"})

        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        with pytest.raises(EmbeddingProviderError) as exc_info:
            await client.do_embed(["text-1"])
        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable is True

    async def test_auth_error_is_not_retryable(self, helper_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="unauthorized")

        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        with pytest.raises(EmbeddingProviderError) as exc_info:
            await client.do_embed(["text-1"])
        assert exc_info.value.retryable is False

    async def test_non_json_body_is_provider_error(self, helper_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        client = EmbedClientOllama(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        with pytest.raises(EmbeddingProviderError):
            await client.do_embed(["text-1"])

    async def test_request_before_boot_fails(self, helper_config):
        client = EmbedClientOllama(helper_config=helper_config)

        with pytest.raises(EmbeddingProviderError):
            await client.do_embed(["text-1"])

    def test_missing_base_url_fails_on_construction(self, env, helper_config):
        env.delenv("EMBED_OLLAMA_BASE_URL")

        with pytest.raises(ValueError):
            EmbedClientOllama(helper_config=helper_config)


class TestEmbedClientOpenai:
    """Wire behaviour of the OpenAI-compatible embedding client."""

    @pytest.fixture
    def openai_env(self, env):
        env.setenv("EMBED_ENGINE", "openai")
        env.setenv("EMBED_MODEL", "text-embedding-3-small")
        env.setenv("EMBED_OPENAI_API_KEY", "sk-test")
        env.setenv("EMBED_OPENAI_BASE_URL", "http://openai.test/v1")
        return env

    async def test_sorts_by_index_and_sends_dimensions(self, openai_env, helper_config, requests_seen):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            requests_seen.append((request, body))
            data = [{"index": i, "embedding": vector_for(t)} for i, t in enumerate(body["input"])]
            return httpx.Response(200, json={"data": list(reversed(data))})

        client = EmbedClientOpenai(helper_config=helper_config)
        await client.boot(transport=httpx.MockTransport(handler))

        vectors = await client.do_embed(["text-1", "text-2", "text-3"])

        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0]
        request, body = requests_seen[0]
        assert request.url == "http://openai.test/v1/embeddings"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert body["dimensions"] == DIMENSION

    def test_api_key_is_required(self, openai_env, helper_config):
        openai_env.delenv("EMBED_OPENAI_API_KEY")

        with pytest.raises(ValueError):
            EmbedClientOpenai(helper_config=helper_config)

    def test_manager_selects_engine(self, openai_env, helper_config):
        client = EmbedClientManager(helper_config=helper_config).get_client()

        assert isinstance(client, EmbedClientOpenai)
        assert client.get_dimension() == DIMENSION


class TestEmbedClientManager:
    def test_unknown_engine(self, env, helper_config):
        env.setenv("EMBED_ENGINE", "nonexistent")

        with pytest.raises(ValueError):
            EmbedClientManager(helper_config=helper_config)

    def test_engine_is_required(self, env, helper_config):
        env.delenv("EMBED_ENGINE")

        with pytest.raises(ValueError):
            EmbedClientManager(helper_config=helper_config)

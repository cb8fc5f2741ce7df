"""Answer service: the retrieval-augmented answering pipeline.

cache lookup → embed query → top-K vector search → prompt assembly →
generation → cache write → interaction log. Stages run strictly in order;
the cache write and the interaction log never fail the response.
"""

import asyncio

from services.chat.ResponseCache import ResponseCache
from services.chat.prompt_templates import build_prompt, order_matches
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.interaction.InteractionClientInterface import InteractionClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.Match import RetrievedMatch
from shared.errors.exceptions import LogError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatResponse, Interaction, SourceItem

RELEVANCE_PRECISION = 3


class AnswerService:
    """Orchestrates cache, embedding, retrieval and generation for a chat query."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        embed_client: EmbedClientInterface,
        llm_client: LLMClientInterface,
        response_cache: ResponseCache,
        interaction_client: InteractionClientInterface | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag_client = rag_client
        self._embed_client = embed_client
        self._llm_client = llm_client
        self._cache = response_cache
        self._interaction_client = interaction_client

        self.top_k = int(helper_config.get_number_val("RAG_TOP_K", default=5))
        self.namespace = helper_config.get_optional_string_val("RAG_NAMESPACE")
        self.max_tokens = int(helper_config.get_number_val("LLM_MAX_TOKENS", default=512))
        self.temperature = float(helper_config.get_number_val("LLM_TEMPERATURE", default=0.2))
        if self.top_k <= 0:
            raise ValidationError(f"RAG_TOP_K must be positive, got {self.top_k}.")

        # strong references to fire-and-forget log writes until they finish
        self._pending: set[asyncio.Task] = set()

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_answer(self, session_id: str, query: str) -> ChatResponse:
        """Answer a query for a session.

        Args:
            session_id (str): Caller-supplied session identifier.
            query (str): The natural-language question.

        Returns:
            ChatResponse: The answer and the titles/relevance of the chunks it drew on.

        Raises:
            ValidationError: If session_id or query is empty. No network call is made.
            EmbeddingProviderError: If the query cannot be embedded.
            VectorStoreError: If the vector search fails.
            GenerationProviderError: If generation fails (GenerationRefusedError on refusals).
            DimensionMismatchError: If the query vector does not fit the index.
        """
        if not session_id or not session_id.strip():
            raise ValidationError("sessionId must not be empty.")
        if not query or not query.strip():
            raise ValidationError("query must not be empty.")

        cached = await self._cache.get(session_id, query)
        if cached is not None:
            self.logging.info("Cache hit — session=%s query=%r", session_id, query[:80])
            return cached

        self.logging.info("Answering — session=%s query=%r top_k=%d", session_id, query[:80], self.top_k)

        vectors = await self._embed_client.do_embed([query])
        matches = await self._rag_client.do_query(vectors[0], top_k=self.top_k, namespace=self.namespace)
        matches = order_matches(matches)
        if not matches:
            self.logging.info("No relevant context found — session=%s", session_id)

        prompt = build_prompt(query, matches)
        answer = await self._llm_client.do_generate(prompt, max_tokens=self.max_tokens, temperature=self.temperature)

        response = ChatResponse(answer=answer, sources=self._build_sources(matches))
        await self._cache.set(session_id, query, response)
        self._schedule_interaction(
            Interaction(
                session_id=session_id,
                query=query,
                answer=answer,
                sources=[m.vector_id for m in matches],
            )
        )

        self.logging.info("Answer complete — session=%s sources=%d", session_id, len(response.sources))
        return response

    async def do_clear_session(self, session_id: str) -> int:
        """Drop every cached answer of a session.

        Returns:
            int: Number of removed cache entries.
        """
        if not session_id or not session_id.strip():
            raise ValidationError("sessionId must not be empty.")
        cleared = await self._cache.invalidate(session_id)
        self.logging.info("Cleared %d cached answers for session=%s", cleared, session_id)
        return cleared

    async def do_drain(self) -> None:
        """Wait for pending interaction writes, e.g. before shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_sources(self, matches: list[RetrievedMatch]) -> list[SourceItem]:
        return [
            SourceItem(title=m.payload.title, relevance=round(m.score, RELEVANCE_PRECISION))
            for m in matches
        ]

    def _schedule_interaction(self, interaction: Interaction) -> None:
        """Record the interaction in the background; the response never waits on it."""
        if self._interaction_client is None:
            return
        task = asyncio.create_task(self._append_interaction(interaction))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _append_interaction(self, interaction: Interaction) -> None:
        try:
            await self._interaction_client.do_append(interaction)
        except LogError as exc:
            self.logging.warning("Interaction log write failed for session=%s: %s", interaction.session_id, exc)
        except Exception as exc:
            self.logging.error(
                "Unexpected error writing interaction log for session=%s: %r", interaction.session_id, exc
            )

"""Boots every configured client once and closes them together.

Used by the API lifespan and the batch ingest runner, so both start the
backends the same way.
"""

from dataclasses import dataclass

from shared.clients.ClientInterface import ClientInterface
from shared.clients.cache.CacheClientInterface import CacheClientInterface
from shared.clients.cache.CacheClientManager import CacheClientManager
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.interaction.InteractionClientInterface import InteractionClientInterface
from shared.clients.interaction.InteractionClientManager import InteractionClientManager
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.errors.exceptions import DimensionMismatchError, ProviderError
from shared.helper.HelperConfig import HelperConfig


@dataclass
class ClientBundle:
    embed_client: EmbedClientInterface
    rag_client: RAGClientInterface
    llm_client: LLMClientInterface | None = None
    cache_client: CacheClientInterface | None = None
    interaction_client: InteractionClientInterface | None = None

    @classmethod
    def from_config(cls, helper_config: HelperConfig, with_chat: bool = True) -> "ClientBundle":
        """Instantiate the clients selected by the *_ENGINE variables.

        Args:
            helper_config (HelperConfig): Configuration source.
            with_chat (bool): Also create the generation, cache and interaction
                log clients. The batch ingest runner only needs embed and rag.
        """
        bundle = cls(
            embed_client=EmbedClientManager(helper_config=helper_config).get_client(),
            rag_client=RAGClientManager(helper_config=helper_config).get_client(),
        )
        if with_chat:
            bundle.llm_client = LLMClientManager(helper_config=helper_config).get_client()
            bundle.cache_client = CacheClientManager(helper_config=helper_config).get_client()
            bundle.interaction_client = InteractionClientManager(helper_config=helper_config).get_client()
        return bundle

    def as_dict(self) -> dict[str, ClientInterface]:
        """All configured clients keyed by client type (e.g. {"embed": ..., "rag": ...})."""
        clients = [self.embed_client, self.rag_client, self.llm_client, self.cache_client, self.interaction_client]
        return {client.get_client_type(): client for client in clients if client is not None}

    ##########################################
    ############## LIFECYCLE #################
    ##########################################

    async def boot(self, logging) -> None:
        """Boot all clients, check their health and prepare the vector index.

        Required backends (embed, rag, llm) must be reachable. The cache and the
        interaction log are best-effort: a failed health check only logs a warning.

        Raises:
            ProviderError: If a required backend is unreachable.
            DimensionMismatchError: If the existing collection was created with a
                vector size different from the embedding dimension.
        """
        for name, client in self.as_dict().items():
            await client.boot()
            try:
                await client.do_healthcheck()
            except ProviderError as exc:
                if name in ("cache", "interaction"):
                    logging.warning("%s backend %s is unreachable, continuing without it for now: %s", name, client.get_engine_name(), exc)
                    continue
                raise
            logging.info("%s backend %s is healthy.", name, client.get_engine_name())

        await self.ensure_index()

    async def ensure_index(self) -> None:
        """Create the collection if missing, otherwise verify its vector size."""
        expected = self.embed_client.get_dimension()
        if expected != self.rag_client.vector_size:
            raise DimensionMismatchError(
                expected=self.rag_client.vector_size, actual=expected, context="EMBED_DIMENSION vs RAG_VECTOR_SIZE"
            )
        if not await self.rag_client.do_existence_check():
            await self.rag_client.do_create_collection()
            return
        actual = await self.rag_client.do_fetch_vector_size()
        if actual != expected:
            raise DimensionMismatchError(expected=actual, actual=expected, context="existing collection vs EMBED_DIMENSION")

    async def close(self) -> None:
        for client in self.as_dict().values():
            await client.close()

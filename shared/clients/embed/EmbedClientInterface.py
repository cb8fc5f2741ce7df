from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors.exceptions import DimensionMismatchError, EmbeddingProviderError, ProviderError

from shared.helper.HelperConfig import HelperConfig

class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and embedding config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL")
        self.embed_dimension = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_DIMENSION", default=1536))
        self.embed_batch_size = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_BATCH_SIZE", default=64))
        if self.embed_batch_size <= 0:
            raise ValueError(f"{self.get_client_type().upper()}_BATCH_SIZE must be positive, got {self.embed_batch_size}.")

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def _check_embeddings(self, embeddings: list[list[float]], expected_count: int) -> None:
        """Validate the count and dimension of vectors returned by the backend.

        Args:
            embeddings (list[list[float]]): Vectors extracted from one response.
            expected_count (int): Number of texts that were sent.

        Raises:
            EmbeddingProviderError: If the backend returned a different number of vectors.
            DimensionMismatchError: If any vector does not match the configured dimension.
        """
        if len(embeddings) != expected_count:
            raise EmbeddingProviderError(
                f"Embedding backend returned {len(embeddings)} vectors for {expected_count} inputs."
            )
        for embedding in embeddings:
            if len(embedding) != self.embed_dimension:
                raise DimensionMismatchError(
                    expected=self.embed_dimension,
                    actual=len(embedding),
                    context=f"model '{self.embed_model}' via {self.get_engine_name()}",
                )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "embed"

    def _get_error_class(self) -> type[ProviderError]:
        return EmbeddingProviderError

    def get_dimension(self) -> int:
        """Returns the configured embedding dimension."""
        return self.embed_dimension

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/api/embed")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str]) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str]): The texts to embed.

        Returns:
            dict: JSON-serialisable request body (e.g. {"model": "...", "input": [...]}).
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from a raw embedding API response.

        Response format differs by backend:
        - Ollama /api/embed: {"embeddings": [[...], [...]]}, already ordered
        - OpenAI-compatible: {"data": [{"embedding": [...], "index": 0}]}, needs sorting

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the input texts.

        Raises:
            EmbeddingProviderError: If the response format is invalid or embeddings are empty.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Send embedding requests and return the extracted vectors.

        Normalises the input to a list, splits it into batches of embed_batch_size,
        builds the backend-specific payload via get_embed_payload(), sends the
        request and extracts the vectors via extract_embeddings_from_response().
        No retry is performed here.

        Args:
            texts (list[str] | str): One or more texts to embed.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the inputs.

        Raises:
            EmbeddingProviderError: On transport, auth, quota or timeout failure.
            DimensionMismatchError: If a returned vector has the wrong length.
        """
        texts = [texts] if isinstance(texts, str) else texts
        if not texts:
            return []

        vectors: list[list[float]] = []
        for batch_start in range(0, len(texts), self.embed_batch_size):
            batch = texts[batch_start: batch_start + self.embed_batch_size]
            body = self.get_embed_payload(batch)
            response = await self.do_request(method="POST", endpoint=self.get_endpoint_embedding(), json=body)
            if response.status_code != 200:
                self.logging.error(
                    "Embedding request failed: status %d, body: %s",
                    response.status_code,
                    response.text[:200],
                )
                raise EmbeddingProviderError(
                    "Embedding request failed with status %d." % response.status_code,
                    status_code=response.status_code,
                    retryable=response.status_code == 429 or response.status_code >= 500,
                )
            embeddings = self.extract_embeddings_from_response(self.parse_json(response))
            self._check_embeddings(embeddings, expected_count=len(batch))
            vectors.extend(embeddings)
        return vectors

from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.Match import RetrievedMatch, UpsertFailure, UpsertResult
from shared.clients.rag.models.VectorPoint import IndexedVector
from shared.errors.exceptions import DimensionMismatchError, ProviderError, VectorStoreError

from shared.helper.HelperConfig import HelperConfig


class RAGClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # index config, vector size defaults to the embedding dimension
        embed_dimension = helper_config.get_number_val("EMBED_DIMENSION", default=1536)
        self.vector_size = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_VECTOR_SIZE", default=embed_dimension))
        self.distance = helper_config.get_string_val(f"{self.get_client_type().upper()}_DISTANCE", default="Cosine")
        self.upsert_batch_size = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_UPSERT_BATCH_SIZE", default=100))

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def check_dimension(self, embedding: list[float], context: str = "") -> None:
        """Ensure an embedding matches the index's configured vector size.

        Args:
            embedding (list[float]): The vector about to be sent.
            context (str): Optional hint for the error message (e.g. the vector id).

        Raises:
            DimensionMismatchError: If the lengths differ.
        """
        if len(embedding) != self.vector_size:
            raise DimensionMismatchError(expected=self.vector_size, actual=len(embedding), context=context)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    def _get_error_class(self) -> type[ProviderError]:
        return VectorStoreError

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_points(self) -> str:
        """
        Returns the endpoint path for points upsert requests.

        Returns:
            str: The endpoint path for points requests (e.g. "/points")
        """
        pass

    @abstractmethod
    def _get_endpoint_search(self) -> str:
        """
        Returns the endpoint path for similarity search requests.

        Returns:
            str: The endpoint path (e.g. "/collections/my_col/points/search")
        """
        pass

    @abstractmethod
    def _get_endpoint_delete_points(self) -> str:
        """
        Returns the endpoint path for deleting points by filter.

        Returns:
            str: The endpoint path (e.g. "/collections/my_col/points/delete")
        """
        pass

    @abstractmethod
    def _get_endpoint_check_collection_existence(self) -> str:
        """
        Returns the endpoint path for collection existence check requests.

        Returns:
            str: The endpoint path for collection existence check requests (e.g. "/existence_check")
        """
        pass

    @abstractmethod
    def _get_endpoint_collection(self) -> str:
        """
        Returns the endpoint path for creating or describing the collection.

        Returns:
            str: The endpoint path (e.g. "/collections/my_col")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_upsert_payload(self, vectors: list[IndexedVector]) -> dict:
        """
        Builds the backend-specific request payload for an upsert.

        Args:
            vectors (list[IndexedVector]): The vectors to upsert.

        Returns:
            dict: The payload for the upsert request.
        """
        pass

    @abstractmethod
    def get_search_payload(self, embedding: list[float], top_k: int, namespace: str | None = None) -> dict:
        """
        Builds the backend-specific request payload for a similarity search.

        Args:
            embedding (list[float]): The query vector.
            top_k (int): Maximum number of matches.
            namespace (str | None): Optional partition to restrict the search to.

        Returns:
            dict: The payload for the search request.
        """
        pass

    @abstractmethod
    def get_delete_payload(self, document_id: str, from_index: int = 0) -> dict:
        """
        Builds the backend-specific request payload deleting the chunks of a document
        whose sequence_index is at least from_index.

        Args:
            document_id (str): The document whose points to remove.
            from_index (int): First sequence_index to delete; 0 deletes the whole document.

        Returns:
            dict: The payload for the delete request.
        """
        pass

    @abstractmethod
    def get_create_collection_payload(self) -> dict:
        """
        Builds the backend-specific request payload for creating the collection
        with the configured vector size and distance.
        """
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def extract_matches(self, raw_response: dict) -> list[RetrievedMatch]:
        """
        Extracts the matches from a raw search response.

        Args:
            raw_response (dict): The raw JSON response from the search endpoint.

        Returns:
            list[RetrievedMatch]: The matches in backend order.

        Raises:
            VectorStoreError: If the response cannot be parsed.
        """
        pass

    @abstractmethod
    def extract_vector_size(self, raw_response: dict) -> int:
        """
        Extracts the configured vector size from a raw collection info response.

        Raises:
            VectorStoreError: If the size cannot be determined.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_existence_check(self) -> bool:
        """Check if the collection exists in the rag backend.

        Returns:
            bool: True if the collection exists, False otherwise.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_check_collection_existence(), raise_on_error=True)
        return bool(self.parse_json(resp).get("result", {}).get("exists"))

    async def do_create_collection(self) -> None:
        """Create the collection with the configured vector size and distance metric."""
        await self.do_request(
            method="PUT",
            json=self.get_create_collection_payload(),
            endpoint=self._get_endpoint_collection(),
            raise_on_error=True,
        )
        self.logging.info(
            "Created %s collection (size=%d, distance=%s).", self.get_engine_name(), self.vector_size, self.distance
        )

    async def do_fetch_vector_size(self) -> int:
        """Read the vector size the existing collection was created with.

        Returns:
            int: The collection's vector dimension.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_collection(), raise_on_error=True)
        return self.extract_vector_size(self.parse_json(resp))

    async def do_upsert(self, vectors: list[IndexedVector]) -> UpsertResult:
        """Upsert vectors into the collection.

        Inserts new points or replaces existing ones with the same vector_id.
        Vectors are sent in batches of upsert_batch_size; a batch the backend
        rejects is reported vector by vector and the remaining batches still run.

        Args:
            vectors (list[IndexedVector]): The vectors to upsert.

        Returns:
            UpsertResult: Number of accepted vectors and the rejected ones with reasons.

        Raises:
            DimensionMismatchError: Before any request, if a vector has the wrong dimension.
        """
        for vector in vectors:
            self.check_dimension(vector.embedding, context=f"vector_id={vector.vector_id}")

        result = UpsertResult()
        for batch_start in range(0, len(vectors), self.upsert_batch_size):
            batch = vectors[batch_start: batch_start + self.upsert_batch_size]
            try:
                await self.do_request(
                    method="PUT",
                    json=self.get_upsert_payload(batch),
                    endpoint=self._get_endpoint_points(),
                    params={"wait": "true"},
                    raise_on_error=True,
                )
            except VectorStoreError as exc:
                self.logging.error(
                    "Upsert of %d points to %s failed: %s", len(batch), self.get_engine_name(), exc
                )
                result.failures.extend(UpsertFailure(vector_id=v.vector_id, reason=str(exc)) for v in batch)
                continue
            result.upserted_count += len(batch)
        return result

    async def do_query(self, embedding: list[float], top_k: int, namespace: str | None = None) -> list[RetrievedMatch]:
        """Return the top_k most similar points, best first.

        Fewer stored points than top_k simply yields fewer matches.

        Args:
            embedding (list[float]): The query vector.
            top_k (int): Maximum number of matches, must be positive.
            namespace (str | None): Optional partition to restrict the search to.

        Returns:
            list[RetrievedMatch]: Matches sorted by descending score, ties by vector_id.

        Raises:
            ValueError: If top_k is not positive.
            DimensionMismatchError: Before any request, if the query vector has the wrong dimension.
            VectorStoreError: On transport failure or timeout.
        """
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}.")
        self.check_dimension(embedding, context="query")

        resp = await self.do_request(
            method="POST",
            json=self.get_search_payload(embedding, top_k, namespace),
            endpoint=self._get_endpoint_search(),
            raise_on_error=True,
        )
        matches = self.extract_matches(self.parse_json(resp))
        matches.sort(key=lambda m: (-m.score, m.vector_id))
        return matches[:top_k]

    async def do_delete_document(self, document_id: str, from_index: int = 0) -> None:
        """Delete the points of a document, optionally only its tail.

        Used after re-ingesting a document that now has fewer chunks, so that
        chunks beyond the new end do not linger in the index.

        Args:
            document_id (str): The document whose chunks to remove.
            from_index (int): First sequence_index to delete; 0 deletes the whole document.
        """
        await self.do_request(
            method="POST",
            json=self.get_delete_payload(document_id, from_index),
            endpoint=self._get_endpoint_delete_points(),
            raise_on_error=True,
        )

import pydantic

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.Match import RetrievedMatch
from shared.clients.rag.models.VectorPoint import IndexedVector, VectorPayload
from shared.errors.exceptions import VectorStoreError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientQdrant(RAGClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    def get_collection(self) -> str:
        return self._collection_name

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default=None)
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_points(self) -> str:
        return f"/collections/{self._collection_name}/points"

    def _get_endpoint_search(self) -> str:
        return f"/collections/{self._collection_name}/points/search"

    def _get_endpoint_delete_points(self) -> str:
        return f"/collections/{self._collection_name}/points/delete"

    def _get_endpoint_check_collection_existence(self) -> str:
        return f"/collections/{self._collection_name}/exists"

    def _get_endpoint_collection(self) -> str:
        return f"/collections/{self._collection_name}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, vectors: list[IndexedVector]) -> dict:
        return {
            "points": [
                {
                    "id": vector.vector_id,
                    "vector": vector.embedding,
                    "payload": vector.payload.model_dump(),
                }
                for vector in vectors
            ]
        }

    def get_search_payload(self, embedding: list[float], top_k: int, namespace: str | None = None) -> dict:
        payload: dict = {
            "vector": embedding,
            "limit": top_k,
            "with_payload": True,
            "with_vector": False,
        }
        if namespace:
            payload["filter"] = {"must": [{"key": "namespace", "match": {"value": namespace}}]}
        return payload

    def get_delete_payload(self, document_id: str, from_index: int = 0) -> dict:
        must: list[dict] = [{"key": "document_id", "match": {"value": document_id}}]
        if from_index > 0:
            must.append({"key": "sequence_index", "range": {"gte": from_index}})
        return {"filter": {"must": must}}

    def get_create_collection_payload(self) -> dict:
        return {"vectors": {"size": self.vector_size, "distance": self.distance}}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_matches(self, raw_response: dict) -> list[RetrievedMatch]:
        matches: list[RetrievedMatch] = []
        for point in raw_response.get("result", []):
            try:
                matches.append(
                    RetrievedMatch(
                        vector_id=str(point.get("id")),
                        score=float(point.get("score", 0.0)),
                        payload=VectorPayload.model_validate(point.get("payload") or {}),
                    )
                )
            except pydantic.ValidationError as e:
                raise VectorStoreError(f"Qdrant point {point.get('id')!r} has an invalid payload: {e}") from e
        return matches

    def extract_vector_size(self, raw_response: dict) -> int:
        vectors = raw_response.get("result", {}).get("config", {}).get("params", {}).get("vectors", {})
        size = vectors.get("size") if isinstance(vectors, dict) else None
        if size is None:
            raise VectorStoreError(f"Could not determine vector size of Qdrant collection {self._collection_name!r}.")
        return int(size)

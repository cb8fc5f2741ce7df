import httpx
import motor.motor_asyncio
from pymongo.errors import PyMongoError

from shared.clients.interaction.InteractionClientInterface import InteractionClientInterface
from shared.errors.exceptions import LogError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import Interaction
from shared.models.config import EnvConfig


class InteractionClientMongo(InteractionClientInterface):
    """Interaction log backed by a MongoDB collection via motor.

    Collection schema (``interactions``)::

        {
            "session_id": str,
            "query": str,
            "answer": str,
            "sources": [str, ...],
            "timestamp": datetime
        }
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._uri = self.get_config_val("URI", default=None, val_type="string")
        self._database_name = self.get_config_val("DATABASE", default="news_rag", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default="interactions", val_type="string")
        self._mongo: motor.motor_asyncio.AsyncIOMotorClient | None = None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Mongo"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="URI", val_type="string", default=None),
            EnvConfig(env_key="DATABASE", val_type="string", default="news_rag"),
            EnvConfig(env_key="COLLECTION", val_type="string", default="interactions"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # credentials travel inside the connection URI
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._uri

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    def _get_collection(self) -> motor.motor_asyncio.AsyncIOMotorCollection:
        if self._mongo is None:
            raise LogError("MongoDB client not initialised. Call boot() before making requests.")
        return self._mongo[self._database_name][self._collection_name]

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Create the async MongoDB client. The transport argument is unused."""
        timeout_ms = int(self.timeout * 1000)
        self._mongo = motor.motor_asyncio.AsyncIOMotorClient(
            self._uri,
            serverSelectionTimeoutMS=timeout_ms,
            socketTimeoutMS=timeout_ms,
        )
        self.logging.info("MongoDB interaction log initialised (%s.%s).", self._database_name, self._collection_name)

    async def close(self) -> None:
        if self._mongo is not None:
            self._mongo.close()
            self._mongo = None

    def is_booted(self) -> bool:
        return self._mongo is not None

    async def do_healthcheck(self) -> bool:
        if self._mongo is None:
            raise LogError("MongoDB client not initialised. Call boot() before making requests.")
        try:
            await self._mongo.admin.command("ping")
        except PyMongoError as e:
            raise LogError(f"MongoDB ping failed: {e}") from e
        return True

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_append(self, interaction: Interaction) -> None:
        try:
            await self._get_collection().insert_one(interaction.model_dump())
        except PyMongoError as e:
            raise LogError(f"Failed to append interaction for session {interaction.session_id!r}: {e}") from e

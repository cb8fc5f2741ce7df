from shared.clients.ClientManager import ClientManager
from shared.clients.cache.CacheClientInterface import CacheClientInterface
from shared.helper.HelperConfig import HelperConfig


class CacheClientManager(ClientManager):
    """Manager class to instantiate the optional response cache client (CACHE_ENGINE)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config, client_type="cache", class_prefix="Cache", required=False)

    def get_client(self) -> CacheClientInterface | None:
        """Return the cache client, or None if caching is disabled."""
        return self.client

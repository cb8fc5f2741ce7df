from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors.exceptions import CacheError, ProviderError
from shared.helper.HelperConfig import HelperConfig


class CacheClientInterface(ClientInterface):
    """Key-value cache with TTL support.

    Every failure surfaces as CacheError; callers are expected to treat it as a miss.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.default_ttl = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_TTL", default=3600))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "cache"

    def _get_error_class(self) -> type[ProviderError]:
        return CacheError

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_get(self, key: str) -> str | None:
        """Read a value.

        Args:
            key (str): The cache key.

        Returns:
            str | None: The stored value, or None if absent or expired.

        Raises:
            CacheError: If the backend cannot be reached.
        """
        pass

    @abstractmethod
    async def do_set(self, key: str, value: str, ttl: int | None = None) -> None:
        """Store a value, overwriting any existing one.

        Args:
            key (str): The cache key.
            value (str): The serialised value.
            ttl (int | None): Expiry in seconds; default_ttl if None.

        Raises:
            CacheError: If the backend cannot be reached.
        """
        pass

    @abstractmethod
    async def do_delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix.

        Args:
            prefix (str): The key prefix.

        Returns:
            int: Number of deleted keys.

        Raises:
            CacheError: If the backend cannot be reached.
        """
        pass

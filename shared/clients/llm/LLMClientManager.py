from shared.clients.ClientManager import ClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager(ClientManager):
    """Manager class to instantiate the configured LLM client (LLM_ENGINE)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config, client_type="llm", class_prefix="LLM", required=True)

    def get_client(self) -> LLMClientInterface:
        """Return the instantiated LLM client."""
        return self.client

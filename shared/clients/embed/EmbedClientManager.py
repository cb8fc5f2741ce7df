from shared.clients.ClientManager import ClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface

class EmbedClientManager(ClientManager):
    """
    Manager class to handle the Embed client based on configuration (EMBED_ENGINE).
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config, client_type="embed", class_prefix="Embed", required=True)

    def get_client(self) -> EmbedClientInterface:
        """
        Returns the instantiated Embed client.

        Returns:
            EmbedClientInterface: The Embed client instance.
        """
        return self.client

from shared.clients.ClientManager import ClientManager
from shared.clients.interaction.InteractionClientInterface import InteractionClientInterface
from shared.helper.HelperConfig import HelperConfig


class InteractionClientManager(ClientManager):
    """Manager class to instantiate the optional interaction log client (INTERACTION_ENGINE)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config, client_type="interaction", class_prefix="Interaction", required=False)

    def get_client(self) -> InteractionClientInterface | None:
        """Return the interaction log client, or None if the log is disabled."""
        return self.client

from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors.exceptions import LogError, ProviderError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import Interaction


class InteractionClientInterface(ClientInterface):
    """Append-only store for answered interactions. Never read back by the pipeline."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "interaction"

    def _get_error_class(self) -> type[ProviderError]:
        return LogError

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_append(self, interaction: Interaction) -> None:
        """Persist a single interaction record.

        Args:
            interaction (Interaction): The record to write.

        Raises:
            LogError: If the backend cannot be reached or rejects the write.
        """
        pass

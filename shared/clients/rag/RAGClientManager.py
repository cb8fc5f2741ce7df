from shared.clients.ClientManager import ClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.clients.rag.RAGClientInterface import RAGClientInterface

class RAGClientManager(ClientManager):
    """
    Manager class to handle the RAG (vector store) client based on configuration (RAG_ENGINE).
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config, client_type="rag", class_prefix="RAG", required=True)

    def get_client(self) -> RAGClientInterface:
        """
        Returns the instantiated RAG client.

        Returns:
            RAGClientInterface: The RAG client instance.
        """
        return self.client

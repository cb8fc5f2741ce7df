from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class ClientManager:
    """
    Instantiates the client configured for one client type.

    The engine is read from "{CLIENT_TYPE}_ENGINE" (e.g. EMBED_ENGINE=ollama) and the
    class "{Prefix}Client{Engine}" is imported from
    "shared.clients.{client_type}.{engine}.{Prefix}Client{Engine}".
    Optional client types (cache, interaction log) resolve to None when no engine is set.
    """

    def __init__(self, helper_config: HelperConfig, client_type: str, class_prefix: str, required: bool = True):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self._client_type = client_type.lower()
        self._class_prefix = class_prefix
        self._required = required
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str | None:
        """
        Reads the engine from ENV configuration.

        Returns:
            str | None: Capitalised engine name (e.g. "Ollama"), or None if an optional engine is not set.

        Raises:
            ValueError: If a required engine is not specified in the configuration.
        """
        env_key = f"{self._client_type.upper()}_ENGINE"
        engine = self.helper_config.get_optional_string_val(env_key)
        if not engine:
            if self._required:
                raise ValueError(f"No {self._class_prefix} engine specified in configuration ({env_key}).")
            return None

        #lowercase all and uppcercase first letter for better comparison and display
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> ClientInterface | None:
        """
        Instantiates the client for the configured engine.

        Returns:
            ClientInterface | None: The instantiated client, or None if an optional engine is not set.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        if engine is None:
            self.logging.info("No %s engine configured, %s client disabled.", self._class_prefix, self._client_type)
            return None

        class_name = f"{self._class_prefix}Client{engine}"
        try:
            module = __import__(
                f"shared.clients.{self._client_type}.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self._class_prefix} engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client for engine: %s", self._class_prefix, engine)
        return client

    def get_client(self) -> ClientInterface | None:
        """
        Returns the instantiated client.

        Returns:
            ClientInterface | None: The client instance, or None for a disabled optional client.
        """
        return self.client

from abc import abstractmethod

import httpx
from shared.clients.ClientInterface import ClientInterface
from shared.errors.exceptions import GenerationProviderError, ProviderError
from shared.helper.HelperConfig import HelperConfig

SYSTEM_PROMPT = (
    "You are a news assistant. Answer the question using only the provided context. "
    "If the context does not contain the answer, say so plainly instead of guessing."
)


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL")
        self.system_prompt = helper_config.get_string_val(f"{self.get_client_type().upper()}_SYSTEM_PROMPT", default=SYSTEM_PROMPT)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    def _get_error_class(self) -> type[ProviderError]:
        return GenerationProviderError

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        """Returns the endpoint path for chat/completion requests (e.g. "/api/chat")."""
        pass

    ################ PAYLOAD BUILDER ##################
    def get_messages(self, prompt: str) -> list[dict]:
        """Wrap an assembled prompt into OpenAI-format chat messages.

        Args:
            prompt (str): The assembled prompt (query + retrieved context).

        Returns:
            list[dict]: [{"role": "system", ...}, {"role": "user", ...}]
        """
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]

    @abstractmethod
    def get_generate_payload(self, messages: list[dict], max_tokens: int, temperature: float) -> dict:
        """Build the backend-specific request body for a chat/completion request.

        Args:
            messages (list[dict]): OpenAI-format messages
                (e.g. [{"role": "user", "content": "..."}]).
            max_tokens (int): Upper bound for generated tokens.
            temperature (float): Sampling temperature.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_generation(self, response_data: dict) -> str:
        """Extract the assistant reply text from a raw chat API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            str: The assistant reply text.

        Raises:
            GenerationRefusedError: If the provider refused on content-policy grounds.
            GenerationProviderError: If the response does not contain a valid reply.
        """
        pass

    def raise_for_generation_status(self, response: httpx.Response) -> None:
        """Raise the matching error for a non-2xx generation response.

        Subclasses override this when the backend reports content-policy
        refusals through an HTTP error body.

        Raises:
            GenerationProviderError: Always.
        """
        self.logging.error(
            "Generation request failed: status %d, body: %s",
            response.status_code,
            response.text[:200],
        )
        raise GenerationProviderError(
            "Generation request failed with status %d." % response.status_code,
            status_code=response.status_code,
            retryable=response.status_code == 429 or response.status_code >= 500,
        )

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """Send a single, non-streaming generation request and return the answer text.

        Args:
            prompt (str): The assembled prompt.
            max_tokens (int): Upper bound for generated tokens.
            temperature (float): Sampling temperature.

        Returns:
            str: The assistant reply text.

        Raises:
            GenerationProviderError: If the HTTP request fails or times out.
            GenerationRefusedError: If the provider refused to answer.
        """
        body = self.get_generate_payload(self.get_messages(prompt), max_tokens=max_tokens, temperature=temperature)
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_chat(),
            json=body,
        )
        if response.status_code >= 300:
            self.raise_for_generation_status(response)
        return self.extract_generation(self.parse_json(response))

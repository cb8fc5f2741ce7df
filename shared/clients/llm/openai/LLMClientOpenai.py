import httpx

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors.exceptions import GenerationProviderError, GenerationRefusedError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientOpenai(LLMClientInterface):
    """Generation client for OpenAI and OpenAI-compatible /chat/completions endpoints."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.openai.com/v1", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Openai"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.openai.com/v1"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/models"

    def _get_endpoint_chat(self) -> str:
        return "/chat/completions"

    ################ PAYLOAD BUILDER ##################
    def get_generate_payload(self, messages: list[dict], max_tokens: int, temperature: float) -> dict:
        return {
            "model": self.chat_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def raise_for_generation_status(self, response: httpx.Response) -> None:
        """OpenAI rejects flagged prompts with HTTP 400 and code "content_policy_violation"."""
        try:
            error = (response.json() or {}).get("error") or {}
        except ValueError:
            error = {}
        if isinstance(error, dict) and error.get("code") == "content_policy_violation":
            raise GenerationRefusedError(error.get("message") or "Prompt rejected by content policy.", status_code=response.status_code)
        super().raise_for_generation_status(response)

    def extract_generation(self, response_data: dict) -> str:
        """Extract the assistant reply from a /chat/completions response.

        A choice finished with "content_filter", or a message carrying a
        "refusal", is a content-policy refusal and is surfaced as such.

        Raises:
            GenerationRefusedError: If the provider refused to answer.
            GenerationProviderError: If the response does not contain a valid reply.
        """
        choices = response_data.get("choices") or []
        if not choices:
            raise GenerationProviderError(
                "OpenAI chat response does not contain any choices. "
                "Response keys: %s" % list(response_data.keys())
            )
        choice = choices[0]
        message = choice.get("message") or {}
        if choice.get("finish_reason") == "content_filter" or message.get("refusal"):
            raise GenerationRefusedError(message.get("refusal") or "Generation blocked by the provider's content filter.")
        content = message.get("content")
        if content is None:
            raise GenerationProviderError("OpenAI chat response does not contain message content.")
        return content

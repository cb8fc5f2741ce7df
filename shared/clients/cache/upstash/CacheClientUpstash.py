import re
from typing import Any

from shared.clients.cache.CacheClientInterface import CacheClientInterface
from shared.errors.exceptions import CacheError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

SCAN_PAGE_SIZE = 100

_RE_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def escape_glob(value: str) -> str:
    """Escape Redis MATCH metacharacters so the value matches literally."""
    return _RE_GLOB_SPECIAL.sub(r"\\\1", value)


class CacheClientUpstash(CacheClientInterface):
    """Redis cache reached through the Upstash REST API.

    Each Redis command is POSTed to the base URL as a JSON array
    (e.g. ["SET", "key", "value", "EX", "60"]) and answered with {"result": ...}.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Upstash"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/ping"

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def _do_command(self, *command: str | int) -> Any:
        """Run a single Redis command and return its result.

        Raises:
            CacheError: On transport failure, timeout, non-2xx status or a Redis error reply.
        """
        resp = await self.do_request(method="POST", json=[str(part) for part in command], raise_on_error=True)
        body = self.parse_json(resp)
        if not isinstance(body, dict):
            raise CacheError(f"Upstash command {command[0]} returned an unexpected reply: {type(body).__name__}.")
        if "error" in body:
            raise CacheError(f"Upstash command {command[0]} failed: {body['error']}")
        return body.get("result")

    async def do_get(self, key: str) -> str | None:
        return await self._do_command("GET", key)

    async def do_set(self, key: str, value: str, ttl: int | None = None) -> None:
        await self._do_command("SET", key, value, "EX", ttl or self.default_ttl)

    async def do_delete_prefix(self, prefix: str) -> int:
        # SCAN is cursor based; "0" marks both the first and the last page
        deleted = 0
        cursor = "0"
        while True:
            page = await self._do_command(
                "SCAN", cursor, "MATCH", f"{escape_glob(prefix)}*", "COUNT", SCAN_PAGE_SIZE
            )
            if not isinstance(page, list) or len(page) != 2:
                raise CacheError(f"Upstash SCAN returned an unexpected reply: {page!r}.")
            next_cursor, keys = page
            if keys:
                deleted += int(await self._do_command("DEL", *keys) or 0)
            cursor = str(next_cursor)
            if cursor == "0":
                break
        return deleted

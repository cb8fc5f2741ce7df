"""Environment-backed settings for the news RAG bridge.

Keys come in two families:
    - backend keys, ``{TYPE}_{ENGINE}_{KEY}`` (e.g. ``EMBED_OLLAMA_BASE_URL``),
      declared by each client through ``EnvConfig`` and resolved in
      ``ClientInterface.get_config_val``;
    - pipeline keys read directly by the services, such as ``CHUNK_SIZE``,
      ``CHUNK_OVERLAP``, ``INGEST_CONCURRENCY``, ``RAG_TOP_K``, ``CACHE_TTL``.

An empty variable counts as unset everywhere.
"""

import logging
import os

_TRUE_VALUES = ("true", "1", "yes", "on")


class HelperConfig:
    """Typed access to the process environment plus the shared logger."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read(self, key: str) -> tuple[str, str | None]:
        key = key.upper()
        raw = os.getenv(key)
        return key, (raw.strip() or None) if raw is not None else None

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string setting.

        Raises:
            ValueError: If the variable is unset and there is no default.
        """
        key, raw = self._read(key)
        if raw is not None:
            return raw
        if default is None:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return default

    def get_optional_string_val(self, key: str) -> str | None:
        """Read a setting whose absence switches a feature off, e.g. ``CACHE_ENGINE``."""
        return self._read(key)[1]

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric setting; values containing a dot become floats.

        Raises:
            ValueError: If the variable is unset without default, or not a number.
        """
        key, raw = self._read(key)
        if raw is None:
            if default is None:
                raise ValueError(f"Environment variable '{key}' is not set.")
            return default
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean setting.

        Raises:
            ValueError: If the variable is unset and there is no default.
        """
        key, raw = self._read(key)
        if raw is None:
            if default is None:
                raise ValueError(f"Environment variable '{key}' is not set.")
            return default
        return raw.lower() in _TRUE_VALUES

    def get_logger(self) -> logging.Logger:
        return self._logger

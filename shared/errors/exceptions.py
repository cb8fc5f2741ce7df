"""Error taxonomy shared by all clients and services.

ValidationError       : malformed or empty input, raised before any network call.
DimensionMismatchError: embedding dimension disagrees with the configured index.
ProviderError         : a remote backend failed (transport, auth, quota, timeout).
    EmbeddingProviderError, GenerationProviderError (GenerationRefusedError), VectorStoreError
CacheError, LogError  : raised by the cache / interaction log clients and
                        always swallowed by the services that use them.
"""


class RAGBridgeError(Exception):
    """Base class for all errors raised by the bridge."""


class ValidationError(RAGBridgeError):
    """Raised when caller input is malformed or empty."""


class DimensionMismatchError(RAGBridgeError):
    """Raised when an embedding vector does not have the configured dimension.

    Attributes:
        expected (int): The configured dimension.
        actual (int): The dimension that was observed.
    """

    def __init__(self, expected: int, actual: int, context: str = "") -> None:
        self.expected = expected
        self.actual = actual
        message = f"Embedding dimension mismatch: expected {expected}, got {actual}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class ProviderError(RAGBridgeError):
    """Raised when a remote backend fails.

    Attributes:
        provider (str): The failing backend kind ("embedding", "generation", "vectorstore", ...).
        timed_out (bool): True if the failure was a timeout.
        status_code (int | None): HTTP status reported by the backend, if any.
        retryable (bool): Hint for callers that wrap the gateways in a retry policy.
    """

    provider = "provider"

    def __init__(self, message: str, timed_out: bool = False, status_code: int | None = None, retryable: bool = True) -> None:
        super().__init__(message)
        self.timed_out = timed_out
        self.status_code = status_code
        self.retryable = retryable


class EmbeddingProviderError(ProviderError):
    provider = "embedding"


class GenerationProviderError(ProviderError):
    provider = "generation"


class GenerationRefusedError(GenerationProviderError):
    """The generation provider refused to answer on content-policy grounds."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, timed_out=False, status_code=status_code, retryable=False)


class VectorStoreError(ProviderError):
    provider = "vectorstore"


class CacheError(ProviderError):
    provider = "cache"


class LogError(ProviderError):
    provider = "interaction"

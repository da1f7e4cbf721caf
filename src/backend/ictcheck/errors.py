class ICTCheckError(Exception):
    """Base class for every failure surfaced to callers of the analyzer."""

    code = "ICT_CHECK_ERROR"


class ContentValidationError(ICTCheckError, ValueError):
    """Raised before any network call when the contract text is out of bounds."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class UnknownProviderError(ICTCheckError, ValueError):
    code = "UNKNOWN_PROVIDER"

    def __init__(self, provider: str):
        super().__init__(f"Unknown AI provider: {provider}")
        self.provider = provider


class CompletionError(ICTCheckError):
    """Transport-level failure talking to a completion provider."""

    code = "COMPLETION_ERROR"

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class ProviderError(CompletionError):
    code = "PROVIDER_ERROR"

    def __init__(self, provider: str, status_code: int | None, body: str):
        label = f"HTTP {status_code}" if status_code is not None else "request failed"
        super().__init__(provider, f"{provider} API error ({label}): {body[:500]}")
        self.status_code = status_code
        self.body = body

    @property
    def transient(self) -> bool:
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class CompletionTimeoutError(CompletionError):
    code = "TIMEOUT"

    def __init__(self, provider: str, timeout: float):
        super().__init__(provider, f"{provider} request timed out after {timeout:g}s")
        self.timeout = timeout


class ResponseFormatError(ICTCheckError):
    """No requirement item could be salvaged from the model response."""

    code = "PARSE_ERROR"


class AnalysisCancelledError(ICTCheckError):
    """The consumer of a streamed analysis went away; the upstream stream is closed."""

    code = "CANCELLED"

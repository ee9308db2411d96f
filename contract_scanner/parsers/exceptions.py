class ScannerError(Exception):
    pass


class ClassificationError(ScannerError):
    pass


class InvalidFormatError(ClassificationError):
    pass


class UnsupportedNetworkError(ClassificationError):
    pass


class ConfigurationError(ScannerError):
    pass


class ProviderError(ScannerError):
    """Failure of one upstream data source; always recovered by the aggregator."""

    kind = "error"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderRateLimitError(ProviderError):
    kind = "rate_limit"


class ProviderNetworkError(ProviderError):
    kind = "network"


class ProviderTimeoutError(ProviderError):
    kind = "timeout"


class ProviderAuthError(ProviderError):
    kind = "auth"


class ProviderResponseError(ProviderError):
    kind = "response"


class ExplanationError(ScannerError):
    pass


class ExplanationAuthError(ExplanationError):
    pass


class ExplanationQuotaError(ExplanationError):
    pass

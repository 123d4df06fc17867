from __future__ import annotations


class WeatherServiceError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WeatherServiceError):
    status_code = 400


class ProviderError(WeatherServiceError):
    """A single upstream provider call failed."""

    status_code = 502

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.reason = message
        self.upstream_status = status_code


class AllProvidersFailedError(WeatherServiceError):
    status_code = 502

    def __init__(self, errors: list[ProviderError]) -> None:
        if errors:
            details = "; ".join(str(error) for error in errors)
            message = f"All weather providers failed ({details})"
        else:
            message = "All weather providers failed (no providers configured)"
        super().__init__(message)
        self.errors = list(errors)


class NoDataError(WeatherServiceError):
    status_code = 500


class RecommendationUnavailableError(WeatherServiceError):
    status_code = 503


class RecommendationError(WeatherServiceError):
    status_code = 502

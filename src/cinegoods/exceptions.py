"""Exception types raised inside the crawl pipeline."""


class CinegoodsError(Exception):
    """Base class for all cinegoods errors."""


class ConfigurationError(CinegoodsError):
    """Required configuration values are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


class AnalysisParseError(CinegoodsError):
    """The model response could not be parsed as a JSON object."""

    def __init__(self, message: str, raw: str = "") -> None:
        self.raw = raw
        super().__init__(message)


class AllModelsFailedError(CinegoodsError):
    """Every model in the fallback list failed to produce a response."""

    def __init__(self, models: list[str], last_error: Exception | None = None) -> None:
        self.models = models
        self.last_error = last_error
        super().__init__(f"All models failed ({', '.join(models)}). Last error: {last_error}")

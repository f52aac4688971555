from typing import ClassVar

from policy_summarizer.analysis.analyzer import PolicyAnalyzer
from policy_summarizer.analysis.client_base import BaseAnalyzerClient
from policy_summarizer.analysis.example_client_adapter import ExampleClientAdapter
from policy_summarizer.analysis.openai_client_adapter import OpenAIClientAdapter
from policy_summarizer.analysis.retrying import RetryingAnalyzer
from policy_summarizer.config.settings import Settings


class AnalyzerFactory:
    """Creates the configured analyzer wrapped in the retry policy."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "xai": "https://api.x.ai/v1",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(
        cls,
        settings: Settings,
        client: BaseAnalyzerClient | None = None,
    ) -> RetryingAnalyzer:
        """Create a retrying analyzer from application settings.

        An explicit ``client`` replaces the provider adapter, which is how
        tests and offline runs inject their own responses.
        """
        provider = settings.analyzer_provider.lower()
        if client is None:
            client = cls.create_client(settings)
        model = "example" if provider == "example" else settings.analyzer_model_name
        analyzer = PolicyAnalyzer(
            client=client,
            model=model,
            temperature=settings.analyzer_temperature,
        )
        return RetryingAnalyzer(
            analyzer,
            timeout_seconds=settings.analyzer_timeout_seconds,
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
            exponential_backoff=settings.retry_exponential_backoff,
        )

    @classmethod
    def create_client(cls, settings: Settings) -> BaseAnalyzerClient:
        provider = settings.analyzer_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.analyzer_api_key,
            timeout_seconds=settings.analyzer_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = (settings.analyzer_base_url or "").strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "analyzer_base_url is required for analyzer_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown analyzer provider '{provider}'. Choose from: {supported}")

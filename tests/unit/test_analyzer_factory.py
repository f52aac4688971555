from unittest.mock import patch

import pytest

from policy_summarizer.analysis.example_client_adapter import ExampleClientAdapter
from policy_summarizer.analysis.factory import AnalyzerFactory
from policy_summarizer.analysis.models import TextChunk
from policy_summarizer.analysis.openai_client_adapter import OpenAIClientAdapter
from policy_summarizer.analysis.retrying import RetryingAnalyzer
from tests.helpers import ScriptedClient, make_settings

_ADAPTER = "policy_summarizer.analysis.factory.OpenAIClientAdapter"


class TestAnalyzerFactory:
    def test_creates_retrying_analyzer(self) -> None:
        analyzer = AnalyzerFactory.create(make_settings(retry_max_attempts=4))
        assert isinstance(analyzer, RetryingAnalyzer)
        assert analyzer.max_attempts == 4

    def test_example_provider_uses_example_adapter(self) -> None:
        client = AnalyzerFactory.create_client(make_settings(analyzer_provider="example"))
        assert isinstance(client, ExampleClientAdapter)

    def test_openai_provider_uses_openai_adapter(self) -> None:
        settings = make_settings(analyzer_provider="openai", analyzer_api_key="k")
        client = AnalyzerFactory.create_client(settings)
        assert isinstance(client, OpenAIClientAdapter)

    def test_openai_base_url_override(self) -> None:
        settings = make_settings(
            analyzer_provider="openai",
            analyzer_api_key="k",
            analyzer_base_url="https://proxy.example.test/v1",
        )
        with patch(_ADAPTER) as adapter:
            AnalyzerFactory.create_client(settings)
        assert adapter.call_args.kwargs["base_url"] == "https://proxy.example.test/v1"

    def test_openai_default_base_url_is_none(self) -> None:
        settings = make_settings(analyzer_provider="openai", analyzer_api_key="k")
        with patch(_ADAPTER) as adapter:
            AnalyzerFactory.create_client(settings)
        assert adapter.call_args.kwargs["base_url"] is None

    def test_known_compatible_provider_uses_default_url(self) -> None:
        settings = make_settings(analyzer_provider="groq", analyzer_api_key="k")
        with patch(_ADAPTER) as adapter:
            AnalyzerFactory.create_client(settings)
        assert adapter.call_args.kwargs["base_url"] == "https://api.groq.com/openai/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        settings = make_settings(analyzer_provider="openai_compatible", analyzer_api_key="k")
        with pytest.raises(ValueError, match="analyzer_base_url is required"):
            AnalyzerFactory.create_client(settings)

    def test_unknown_provider_raises(self) -> None:
        settings = make_settings(analyzer_provider="nope")
        with pytest.raises(ValueError, match="Unknown analyzer provider"):
            AnalyzerFactory.create_client(settings)

    def test_provider_name_is_case_insensitive(self) -> None:
        client = AnalyzerFactory.create_client(make_settings(analyzer_provider="EXAMPLE"))
        assert isinstance(client, ExampleClientAdapter)

    @pytest.mark.asyncio
    async def test_explicit_client_is_used(self) -> None:
        client = ScriptedClient()
        analyzer = AnalyzerFactory.create(make_settings(), client=client)
        result = await analyzer.analyze_chunk(TextChunk(index=0, total_chunks=1, content="text"))
        await analyzer.summarize(result, instructions="write", max_tokens=10)
        assert len(client.analysis_calls) == 1
        assert client.summary_calls == ["write"]


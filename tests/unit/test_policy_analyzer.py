import json

import pytest

from policy_summarizer.analysis.analyzer import PolicyAnalyzer, parse_json_object
from policy_summarizer.analysis.exceptions import AnalysisParseError
from tests.helpers import ScriptedClient, analysis_payload


class TestParseJsonObject:
    def test_plain_json(self) -> None:
        assert parse_json_object('{"a": 1}') == {"a": 1}

    def test_strips_code_fences(self) -> None:
        assert parse_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_salvages_outermost_braces(self) -> None:
        raw = 'Here is the analysis: {"a": {"b": 2}} Hope this helps.'
        assert parse_json_object(raw) == {"a": {"b": 2}}

    def test_unrecoverable_text_raises(self) -> None:
        with pytest.raises(AnalysisParseError, match="Invalid JSON"):
            parse_json_object("no json here")

    def test_broken_braces_raise(self) -> None:
        with pytest.raises(AnalysisParseError):
            parse_json_object('prefix {"a": } suffix')

    def test_non_object_raises(self) -> None:
        with pytest.raises(AnalysisParseError, match="object"):
            parse_json_object("[1, 2]")


class TestPolicyAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_returns_validated_result(self) -> None:
        client = ScriptedClient()
        analyzer = PolicyAnalyzer(client=client, model="m")
        result = await analyzer.analyze("Policy text")
        assert result.insurer == "Maple Leaf Assurance Company"
        assert "Policy text" in client.analysis_calls[0]

    @pytest.mark.asyncio
    async def test_prompt_contains_schema(self) -> None:
        client = ScriptedClient()
        await PolicyAnalyzer(client=client, model="m").analyze("text")
        assert '"policy_type"' in client.analysis_calls[0]

    @pytest.mark.asyncio
    async def test_chunk_note_only_for_split_documents(self) -> None:
        client = ScriptedClient()
        analyzer = PolicyAnalyzer(client=client, model="m")
        await analyzer.analyze("whole")
        await analyzer.analyze("part", chunk_index=1, total_chunks=3)
        assert "part 2 of 3" not in client.analysis_calls[0]
        assert "part 2 of 3" in client.analysis_calls[1]

    @pytest.mark.asyncio
    async def test_schema_violation_raises_parse_error(self) -> None:
        client = ScriptedClient(analysis={"unexpected": True})
        with pytest.raises(AnalysisParseError):
            await PolicyAnalyzer(client=client, model="m").analyze("text")

    @pytest.mark.asyncio
    async def test_summarize_sends_result_as_json(self) -> None:
        client = ScriptedClient(summary="  A summary.  ")
        analyzer = PolicyAnalyzer(client=client, model="m")
        result = await analyzer.analyze("text")
        text = await analyzer.summarize(result, instructions="Be brief", max_tokens=100)
        assert text == "A summary."
        assert client.summary_calls == ["Be brief"]

    def test_temperature_is_clamped(self) -> None:
        analyzer = PolicyAnalyzer(client=ScriptedClient(), model="m", temperature=0.9)
        assert analyzer._temperature == 0.3


class TestSummarizePayload:
    @pytest.mark.asyncio
    async def test_user_prompt_holds_wire_field_names(self) -> None:
        client = ScriptedClient()
        analyzer = PolicyAnalyzer(client=client, model="m")
        result = await analyzer.analyze("text")
        await analyzer.summarize(result, instructions="x", max_tokens=10)
        payload = json.loads(client.summary_prompts[0].split("\n\n", 1)[1])
        assert payload["coverage"][0]["type"] == "Emergency Medical"
        assert payload["policy_type"] == analysis_payload()["policy_type"]

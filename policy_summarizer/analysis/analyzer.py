"""AI-powered insurance policy analyzer."""

import json
from pathlib import Path

from policy_summarizer.analysis.base import BaseAnalyzer
from policy_summarizer.analysis.client_base import BaseAnalyzerClient
from policy_summarizer.analysis.exceptions import AnalysisParseError
from policy_summarizer.analysis.models import StructuredResult, to_payload
from policy_summarizer.analysis.prompt_loader import load_json_schema, load_prompt_template
from policy_summarizer.analysis.validator import validate_and_build
from policy_summarizer.logging.logger import Log

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert insurance policy analyst. "
    "Extract key policy information and respond only with valid JSON."
)
MAX_TEMPERATURE = 0.3


class PolicyAnalyzer(BaseAnalyzer):
    """Analyzes policy text and writes summaries using an AI provider."""

    def __init__(
        self,
        *,
        client: BaseAnalyzerClient,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 4000,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = ANALYSIS_SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(MAX_TEMPERATURE, temperature))
        self._max_tokens = max_tokens
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._json_schema = load_json_schema(json_schema_path)

    async def analyze(
        self,
        text: str,
        *,
        chunk_index: int = 0,
        total_chunks: int = 1,
    ) -> StructuredResult:
        prompt = self._build_prompt(text, chunk_index, total_chunks)
        Log.debug(f"Analysis prompt ({len(prompt)} chars)", chunk=chunk_index + 1)

        raw_response = await self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            max_tokens=self._max_tokens,
            json_output=True,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        result = validate_and_build(parse_json_object(raw_response))
        Log.info(
            f"Analysis complete: {len(result.coverages)} coverages, "
            f"{len(result.exclusions)} exclusions",
            chunk=f"{chunk_index + 1}/{total_chunks}",
        )
        return result

    async def summarize(
        self,
        result: StructuredResult,
        *,
        instructions: str,
        max_tokens: int,
    ) -> str:
        payload = json.dumps(to_payload(result), indent=2)
        response = await self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=instructions,
            user_prompt=f"Generate a policy summary from this data:\n\n{payload}",
            max_tokens=max_tokens,
            json_output=False,
        )
        return response.strip()

    def _build_prompt(self, text: str, chunk_index: int, total_chunks: int) -> str:
        chunk_note = ""
        if total_chunks > 1:
            chunk_note = (
                f"\nNOTE: This is part {chunk_index + 1} of {total_chunks} of a larger "
                "document. Extract only what this part states; other parts are "
                "analyzed separately and merged afterwards.\n"
            )
        return self._prompt_template.format(
            document_text=text,
            json_schema=self._json_schema,
            chunk_note=chunk_note,
        )


def parse_json_object(raw: str) -> dict[str, object]:
    """Parse an analyzer response into a JSON object.

    Markdown code fences are stripped. If the text is not valid JSON, one
    salvage pass parses the span between the first "{" and the last "}".

    Raises:
        AnalysisParseError: if no JSON object can be recovered.
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        parsed = _salvage(cleaned, exc)

    if not isinstance(parsed, dict):
        raise AnalysisParseError("JSON response must be an object")
    return parsed


def _salvage(text: str, error: json.JSONDecodeError) -> object:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise AnalysisParseError(f"Invalid JSON response: {error}") from error
    Log.warning("Response is not valid JSON, parsing the outermost braces")
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise AnalysisParseError(f"Invalid JSON response: {exc}") from exc

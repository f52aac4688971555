import json
from typing import Any

from policy_summarizer.analysis.client_base import BaseAnalyzerClient
from policy_summarizer.config.settings import Settings

COMPLETE_SUMMARY = "\n\n".join(
    [
        "[Policy Overview] This travel policy protects you abroad.",
        "[Coverage Details] Emergency medical costs are covered up to $5,000,000.",
        "[Key Benefits] Assistance is available at any hour.",
        "[Important Exclusions] Unstable pre-existing conditions are excluded.",
        "[Next Steps] Keep the emergency number with you when you travel.",
    ]
)


def analysis_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "policy_type": "Travel Insurance",
        "insurer": "Maple Leaf Assurance Company",
        "policy_number": "TRV-123",
        "policy_period": "2026-01-01 to 2026-12-31",
        "insured_name": "Jordan Smith",
        "coverage": [{"type": "Emergency Medical", "limit": "$5,000,000", "deductible": None}],
        "benefits": ["24-hour assistance"],
        "exclusions": ["Pre-existing conditions"],
        "contacts": [{"type": "Claims", "details": "1-800-555-0100"}],
        "explanation": "Protects against large medical bills abroad.",
        "confidence": 0.9,
        "warnings": [],
    }
    payload.update(overrides)
    return payload


class ScriptedClient(BaseAnalyzerClient):
    """Client that answers analysis calls with JSON and summary calls with text."""

    def __init__(
        self,
        analysis: dict[str, Any] | None = None,
        summary: str = COMPLETE_SUMMARY,
        analysis_error: Exception | None = None,
        summary_error: Exception | None = None,
    ) -> None:
        self.analysis = analysis or analysis_payload()
        self.summary = summary
        self.analysis_error = analysis_error
        self.summary_error = summary_error
        self.analysis_calls: list[str] = []
        self.summary_calls: list[str] = []
        self.summary_prompts: list[str] = []

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        json_output: bool,
    ) -> str:
        if json_output:
            self.analysis_calls.append(user_prompt)
            if self.analysis_error is not None:
                raise self.analysis_error
            return json.dumps(self.analysis)
        self.summary_calls.append(system_prompt)
        self.summary_prompts.append(user_prompt)
        if self.summary_error is not None:
            raise self.summary_error
        return self.summary


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "analyzer_provider": "example",
        "retry_delay_seconds": 0.0,
        "retry_max_attempts": 2,
        "storage_backend": "memory",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)

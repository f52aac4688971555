"""Example analyzer client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalyzerClient and register the provider in AnalyzerFactory.
"""

import json
from typing import ClassVar

from policy_summarizer.analysis.client_base import BaseAnalyzerClient


class ExampleClientAdapter(BaseAnalyzerClient):
    """Example adapter that returns a fixed analysis and a fixed summary.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_ANALYSIS: ClassVar[dict[str, object]] = {
        "policy_type": "Travel Insurance",
        "insurer": "Example Insurance Company",
        "policy_number": "EX-0001",
        "policy_period": "Not specified",
        "insured_name": "Not specified",
        "coverage": [
            {"type": "Emergency Medical", "limit": "$5,000,000", "deductible": "$0"},
        ],
        "benefits": [
            {"title": "24-hour assistance", "description": "Help line available worldwide."},
        ],
        "exclusions": [{"description": "Pre-existing medical conditions"}],
        "contacts": [{"type": "Emergency Line", "details": "1-800-000-0000"}],
        "explanation": "Covers emergency medical costs while travelling.",
        "confidence": 0.5,
        "warnings": ["Example adapter output; no document was analyzed."],
    }

    DEFAULT_SUMMARY: ClassVar[str] = "\n\n".join(
        [
            "[Policy Overview] This example policy provides emergency medical protection.",
            "[Coverage Details] Emergency medical expenses are covered up to $5,000,000.",
            "[Key Benefits] Assistance is available around the clock.",
            "[Important Exclusions] Pre-existing medical conditions are excluded.",
            "[Next Steps] Review the full policy wording with your agent.",
        ]
    )

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
        _ = model, temperature, system_prompt, user_prompt, max_tokens
        if json_output:
            return json.dumps(self.DEFAULT_ANALYSIS)
        return self.DEFAULT_SUMMARY

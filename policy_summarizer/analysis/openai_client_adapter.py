from typing import Any

import httpx
import openai

from policy_summarizer.analysis.client_base import BaseAnalyzerClient
from policy_summarizer.analysis.exceptions import AnalysisTimeoutError, AnalysisUpstreamError


class OpenAIClientAdapter(BaseAnalyzerClient):
    """Analyzer client adapter built on the OpenAI-compatible chat API.

    SDK-level retries are disabled; RetryingAnalyzer owns the retry policy.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
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
        extra: dict[str, Any] = {}
        if json_output:
            extra["response_format"] = {"type": "json_object"}
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **extra,
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise AnalysisTimeoutError(f"AI provider timeout: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise AnalysisUpstreamError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisUpstreamError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AnalysisUpstreamError("AI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise AnalysisUpstreamError("AI returned empty response")
        return content

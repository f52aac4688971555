from abc import ABC, abstractmethod


class BaseAnalyzerClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
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
        """Return provider response as plain text.

        Raises:
            AnalysisTimeoutError: if the provider did not answer in time.
            AnalysisUpstreamError: on transport or non-2xx service errors.
        """

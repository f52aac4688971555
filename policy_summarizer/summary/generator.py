"""Narrative summary generation with truncation repair and a template fallback.

The first request uses the profile for the requested length. If the response
looks truncated, exactly one regeneration is issued with the stricter profile
for that length and it replaces the first response only when it is strictly
longer. Analyzer failures never escape: the caller always gets a summary, at
worst the deterministic template built from the structured result.
"""

from dataclasses import dataclass
from typing import Protocol

from policy_summarizer.analysis.exceptions import AnalysisError
from policy_summarizer.analysis.models import StructuredResult
from policy_summarizer.analysis.prompt_loader import load_named_prompt
from policy_summarizer.logging.logger import Log
from policy_summarizer.summary.completeness import (
    CompletenessChecker,
    ParagraphCompletenessChecker,
)
from policy_summarizer.summary.fallback import build_fallback_summary
from policy_summarizer.summary.profiles import PROFILES, SummaryProfile, profiles_for

FALLBACK_PROFILE = "fallback"


class Summarizer(Protocol):
    async def summarize(
        self,
        result: StructuredResult,
        *,
        instructions: str,
        max_tokens: int,
    ) -> str: ...


@dataclass(frozen=True)
class GeneratedSummary:
    text: str
    profile: str
    regenerated: bool = False
    used_fallback: bool = False


class SummaryGenerator:
    def __init__(
        self,
        summarizer: Summarizer,
        checker: CompletenessChecker | None = None,
    ) -> None:
        self._summarizer = summarizer
        self._checker = checker or ParagraphCompletenessChecker()
        self._instructions = {
            profile.name: load_named_prompt(profile.prompt_name)
            for pair in PROFILES.values()
            for profile in pair
        }

    async def summarize(self, result: StructuredResult, length: str = "detailed") -> str:
        return (await self.generate(result, length)).text

    async def generate(
        self,
        result: StructuredResult,
        length: str = "detailed",
    ) -> GeneratedSummary:
        first_profile, strict_profile = profiles_for(length)
        try:
            first = await self._request(result, first_profile)
        except AnalysisError as exc:
            Log.warning(f"Summary generation failed, using fallback template: {exc}",
                        length=length)
            return self._fallback(result, length)

        if self._checker.is_complete(first, first_profile):
            Log.info(f"Summary generated ({len(first)} chars)", profile=first_profile.name)
            return GeneratedSummary(text=first, profile=first_profile.name)

        Log.warning(
            "Summary looks truncated, regenerating once with stricter profile",
            length=len(first),
            profile=strict_profile.name,
        )
        try:
            second = await self._request(result, strict_profile)
        except AnalysisError as exc:
            Log.warning(f"Summary regeneration failed: {exc}", profile=strict_profile.name)
            second = ""

        if len(second) > len(first):
            text, profile = second, strict_profile
        else:
            text, profile = first, first_profile
            Log.info("Regenerated summary is not longer, keeping first attempt")

        if not text:
            return self._fallback(result, length)
        return GeneratedSummary(text=text, profile=profile.name, regenerated=True)

    async def _request(self, result: StructuredResult, profile: SummaryProfile) -> str:
        text = await self._summarizer.summarize(
            result,
            instructions=self._instructions[profile.name],
            max_tokens=profile.max_tokens,
        )
        return text.strip()

    @staticmethod
    def _fallback(result: StructuredResult, length: str) -> GeneratedSummary:
        Log.info("Built fallback summary from structured result", length=length)
        return GeneratedSummary(
            text=build_fallback_summary(result, length),
            profile=FALLBACK_PROFILE,
            used_fallback=True,
        )

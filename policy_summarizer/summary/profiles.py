from dataclasses import dataclass
from typing import Literal

SummaryLength = Literal["detailed", "short"]


@dataclass(frozen=True)
class SummaryProfile:
    """Target shape of a summary and the prompt that asks for it."""

    name: str
    paragraphs: int
    min_words: int
    max_words: int
    max_tokens: int
    prompt_name: str


DETAILED = SummaryProfile(
    name="detailed",
    paragraphs=5,
    min_words=400,
    max_words=600,
    max_tokens=3000,
    prompt_name="summary_detailed",
)
DETAILED_STRICT = SummaryProfile(
    name="detailed_strict",
    paragraphs=5,
    min_words=250,
    max_words=450,
    max_tokens=2000,
    prompt_name="summary_detailed_strict",
)
SHORT = SummaryProfile(
    name="short",
    paragraphs=1,
    min_words=150,
    max_words=200,
    max_tokens=1000,
    prompt_name="summary_short",
)
SHORT_STRICT = SummaryProfile(
    name="short_strict",
    paragraphs=1,
    min_words=80,
    max_words=150,
    max_tokens=600,
    prompt_name="summary_short_strict",
)

# (first attempt, regeneration) per requested length
PROFILES: dict[str, tuple[SummaryProfile, SummaryProfile]] = {
    "detailed": (DETAILED, DETAILED_STRICT),
    "short": (SHORT, SHORT_STRICT),
}


def profiles_for(length: str) -> tuple[SummaryProfile, SummaryProfile]:
    try:
        return PROFILES[length]
    except KeyError:
        raise ValueError(
            f"Unknown summary length '{length}'. Choose from: {sorted(PROFILES)}"
        ) from None

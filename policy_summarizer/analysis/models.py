from dataclasses import asdict, dataclass, field
from typing import Any

UNABLE_TO_DETERMINE = "Unable to determine"
NOT_SPECIFIED = "Not specified"

PLACEHOLDER_VALUES = frozenset({"", UNABLE_TO_DETERMINE.lower(), NOT_SPECIFIED.lower()})


@dataclass(frozen=True)
class TextChunk:
    """A bounded slice of document text sent to the analyzer on its own."""

    index: int
    total_chunks: int
    content: str


@dataclass(frozen=True)
class Coverage:
    """A coverage line with its limit and optional deductible."""

    type: str
    limit: str = NOT_SPECIFIED
    deductible: str | None = None


@dataclass(frozen=True)
class Benefit:
    """A key benefit in plain language."""

    title: str
    description: str = ""


@dataclass(frozen=True)
class Exclusion:
    """An exclusion or limitation."""

    description: str


@dataclass(frozen=True)
class Contact:
    """A contact entry (claims line, administrator, emergency assistance)."""

    type: str
    details: str


@dataclass(frozen=True)
class StructuredResult:
    """Structured extraction of a policy document."""

    policy_type: str = UNABLE_TO_DETERMINE
    insurer: str = UNABLE_TO_DETERMINE
    policy_number: str = UNABLE_TO_DETERMINE
    policy_period: str = UNABLE_TO_DETERMINE
    insured_name: str = UNABLE_TO_DETERMINE
    coverages: list[Coverage] = field(default_factory=list)
    benefits: list[Benefit] = field(default_factory=list)
    exclusions: list[Exclusion] = field(default_factory=list)
    contacts: list[Contact] = field(default_factory=list)
    explanation: str = ""
    confidence: float | None = None
    warnings: list[str] = field(default_factory=list)


def default_result(reason: str = "") -> StructuredResult:
    """The "unable to determine" result used when nothing could be analyzed."""
    warnings = [reason] if reason else []
    return StructuredResult(
        explanation="Document processing failed - unable to extract policy information",
        warnings=warnings,
    )


def is_placeholder(value: str) -> bool:
    return value.strip().lower() in PLACEHOLDER_VALUES


def to_payload(result: StructuredResult) -> dict[str, object]:
    """Serialize a result using the analyzer's wire field names."""
    payload = asdict(result)
    payload["coverage"] = payload.pop("coverages")
    return payload


def from_payload(payload: dict[str, Any]) -> StructuredResult:
    """Rebuild a result stored with to_payload.

    Stored results were validated when the analyzer produced them, so lists
    are taken as they are, however many chunks contributed to them.
    """
    return StructuredResult(
        policy_type=payload.get("policy_type", UNABLE_TO_DETERMINE),
        insurer=payload.get("insurer", UNABLE_TO_DETERMINE),
        policy_number=payload.get("policy_number", UNABLE_TO_DETERMINE),
        policy_period=payload.get("policy_period", UNABLE_TO_DETERMINE),
        insured_name=payload.get("insured_name", UNABLE_TO_DETERMINE),
        coverages=[Coverage(**item) for item in payload.get("coverage", [])],
        benefits=[Benefit(**item) for item in payload.get("benefits", [])],
        exclusions=[Exclusion(**item) for item in payload.get("exclusions", [])],
        contacts=[Contact(**item) for item in payload.get("contacts", [])],
        explanation=payload.get("explanation", ""),
        confidence=payload.get("confidence"),
        warnings=list(payload.get("warnings", [])),
    )

"""Validates the analyzer's parsed JSON and builds a StructuredResult."""

from typing import Any

from policy_summarizer.analysis.exceptions import AnalysisParseError
from policy_summarizer.analysis.models import (
    NOT_SPECIFIED,
    UNABLE_TO_DETERMINE,
    Benefit,
    Contact,
    Coverage,
    Exclusion,
    StructuredResult,
)

_MAX_ITEMS = 200
_REQUIRED_FIELDS = ("policy_type", "coverage", "exclusions")
_SCALAR_FIELDS = ("policy_type", "insurer", "policy_number", "policy_period", "insured_name")


def validate_and_build(data: dict[str, Any]) -> StructuredResult:
    """Validate raw parsed JSON and build a StructuredResult.

    Missing optional scalars fall back to "Unable to determine"; exclusions and
    benefits given as bare strings are normalised to objects.

    Raises:
        AnalysisParseError: on any validation failure.
    """
    for name in _REQUIRED_FIELDS:
        if name not in data:
            raise AnalysisParseError(f"Missing required top-level field: {name}")

    scalars = {name: _build_scalar(data.get(name), name) for name in _SCALAR_FIELDS}
    return StructuredResult(
        **scalars,
        coverages=[_build_coverage(item, i) for i, item in enumerate(_list(data, "coverage"))],
        benefits=[_build_benefit(item, i) for i, item in enumerate(_list(data, "benefits"))],
        exclusions=[
            _build_exclusion(item, i) for i, item in enumerate(_list(data, "exclusions"))
        ],
        contacts=[_build_contact(item, i) for i, item in enumerate(_list(data, "contacts"))],
        explanation=_build_text(data.get("explanation"), "explanation"),
        confidence=_build_confidence(data.get("confidence")),
        warnings=[_build_text(w, "warnings") for w in _list(data, "warnings")],
    )


def _list(data: dict[str, Any], name: str) -> list[Any]:
    raw = data.get(name)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise AnalysisParseError(f"'{name}' must be a list")
    if len(raw) > _MAX_ITEMS:
        raise AnalysisParseError(f"Too many '{name}' entries: {len(raw)} (max {_MAX_ITEMS})")
    return raw


def _build_scalar(raw: Any, name: str) -> str:
    if raw is None:
        return UNABLE_TO_DETERMINE
    if not isinstance(raw, str):
        raise AnalysisParseError(f"'{name}' must be a string or null")
    return raw.strip() or UNABLE_TO_DETERMINE


def _build_text(raw: Any, name: str) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise AnalysisParseError(f"'{name}' must contain strings")
    return raw.strip()


def _build_confidence(raw: Any) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise AnalysisParseError("'confidence' must be a number or null")
    if not 0.0 <= float(raw) <= 1.0:
        raise AnalysisParseError(f"'confidence' must be between 0 and 1, got {raw}")
    return float(raw)


def _build_coverage(raw: Any, index: int) -> Coverage:
    if not isinstance(raw, dict):
        raise AnalysisParseError(f"Coverage at index {index} must be an object")
    coverage_type = raw.get("type")
    if not coverage_type or not isinstance(coverage_type, str):
        raise AnalysisParseError(f"Coverage at index {index}: 'type' must be a non-empty string")
    limit = raw.get("limit")
    if limit is not None and not isinstance(limit, str):
        raise AnalysisParseError(f"Coverage at index {index}: 'limit' must be a string or null")
    deductible = raw.get("deductible")
    if deductible is not None and not isinstance(deductible, str):
        raise AnalysisParseError(
            f"Coverage at index {index}: 'deductible' must be a string or null"
        )
    return Coverage(
        type=coverage_type.strip(),
        limit=(limit or "").strip() or NOT_SPECIFIED,
        deductible=deductible.strip() if deductible else None,
    )


def _build_benefit(raw: Any, index: int) -> Benefit:
    if isinstance(raw, str) and raw.strip():
        return Benefit(title=raw.strip())
    if not isinstance(raw, dict):
        raise AnalysisParseError(f"Benefit at index {index} must be a string or an object")
    title = raw.get("title")
    if not title or not isinstance(title, str):
        raise AnalysisParseError(f"Benefit at index {index}: 'title' must be a non-empty string")
    description = raw.get("description") or ""
    if not isinstance(description, str):
        raise AnalysisParseError(f"Benefit at index {index}: 'description' must be a string")
    return Benefit(title=title.strip(), description=description.strip())


def _build_exclusion(raw: Any, index: int) -> Exclusion:
    if isinstance(raw, str) and raw.strip():
        return Exclusion(description=raw.strip())
    if not isinstance(raw, dict):
        raise AnalysisParseError(f"Exclusion at index {index} must be a string or an object")
    description = raw.get("description")
    if not description or not isinstance(description, str):
        raise AnalysisParseError(
            f"Exclusion at index {index}: 'description' must be a non-empty string"
        )
    return Exclusion(description=description.strip())


def _build_contact(raw: Any, index: int) -> Contact:
    if not isinstance(raw, dict):
        raise AnalysisParseError(f"Contact at index {index} must be an object")
    contact_type = raw.get("type")
    details = raw.get("details")
    if not contact_type or not isinstance(contact_type, str):
        raise AnalysisParseError(f"Contact at index {index}: 'type' must be a non-empty string")
    if not details or not isinstance(details, str):
        raise AnalysisParseError(f"Contact at index {index}: 'details' must be a non-empty string")
    return Contact(type=contact_type.strip(), details=details.strip())

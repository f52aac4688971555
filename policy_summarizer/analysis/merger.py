from collections.abc import Sequence

from policy_summarizer.analysis.models import StructuredResult, default_result, is_placeholder

_IDENTITY_FIELDS = ("policy_type", "insurer", "policy_number", "policy_period", "insured_name")


def merge_results(results: Sequence[StructuredResult]) -> StructuredResult:
    """Combine per-chunk results, in chunk order, into one result.

    List fields are concatenated without de-duplication. Identity fields take
    the first value that is not a placeholder, the explanation keeps the
    longest non-empty value, and confidence keeps the lowest reported value.
    An empty input yields the "unable to determine" default.
    """
    if not results:
        return default_result()
    if len(results) == 1:
        return results[0]

    identity = {name: _first_known(results, name) for name in _IDENTITY_FIELDS}
    confidences = [r.confidence for r in results if r.confidence is not None]
    return StructuredResult(
        **identity,
        coverages=[item for r in results for item in r.coverages],
        benefits=[item for r in results for item in r.benefits],
        exclusions=[item for r in results for item in r.exclusions],
        contacts=[item for r in results for item in r.contacts],
        explanation=max((r.explanation for r in results), key=len),
        confidence=min(confidences) if confidences else None,
        warnings=[w for r in results for w in r.warnings],
    )


def _first_known(results: Sequence[StructuredResult], name: str) -> str:
    for result in results:
        value: str = getattr(result, name)
        if not is_placeholder(value):
            return value
    return getattr(results[0], name)

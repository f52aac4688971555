from policy_summarizer.analysis.models import StructuredResult, is_placeholder


def build_fallback_summary(result: StructuredResult, length: str) -> str:
    """Deterministic summary built from result fields alone."""
    policy_type = _known(result.policy_type, "insurance policy")
    insurer = _known(result.insurer, "your insurance company")
    coverage_list = (
        ", ".join(f"{c.type} ({c.limit})" for c in result.coverages)
        or "coverage details not available"
    )
    exclusions_list = (
        ", ".join(e.description for e in result.exclusions) or "exclusions not available"
    )

    if length == "short":
        return (
            f"[Your Coverage Summary] This {policy_type} from {insurer} provides coverage "
            f"for {coverage_list}. Key exclusions include: {exclusions_list}. "
            "Please review the complete policy for full details."
        )

    benefits = "; ".join(b.title for b in result.benefits)
    benefits_text = (
        f"Key benefits include: {benefits}."
        if benefits
        else "This policy provides protection against the covered risks listed above."
    )
    return "\n\n".join(
        [
            f"[Policy Overview] This {policy_type} from {insurer} provides coverage "
            "for the risks described in your policy documents.",
            f"[Coverage Details] Your policy includes: {coverage_list}.",
            f"[Key Benefits] {benefits_text}",
            f"[Important Exclusions] Please be aware of these exclusions: {exclusions_list}.",
            "[Next Steps] Review the complete policy documents for full terms and "
            "conditions. Contact your agent with any questions.",
        ]
    )


def _known(value: str, default: str) -> str:
    return default if is_placeholder(value) else value

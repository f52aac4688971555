from pathlib import Path

from policy_summarizer.analysis.exceptions import AnalysisError

PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the policy analysis prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled analysis_prompt.txt.

    Returns:
        The raw template string with placeholders.

    Raises:
        AnalysisError: if the file cannot be read.
    """
    return _read(path or PROMPT_DIR / "analysis_prompt.txt", "prompt template")


def load_json_schema(path: Path | None = None) -> str:
    """Load the structured result schema description from a file.

    Args:
        path: Path to the JSON schema file.
              Defaults to the bundled analysis_schema.json.

    Returns:
        The raw JSON schema string.

    Raises:
        AnalysisError: if the file cannot be read.
    """
    return _read(path or PROMPT_DIR / "analysis_schema.json", "JSON schema")


def load_named_prompt(name: str) -> str:
    """Load a bundled prompt by file stem, e.g. ``summary_short``."""
    return _read(PROMPT_DIR / f"{name}.txt", f"prompt '{name}'")


def _read(path: Path, label: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnalysisError(f"Failed to load {label}: {exc}") from exc

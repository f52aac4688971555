from typing import Any, Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DeploymentProfile = Literal["local", "hosted"]

# Defaults per deployment profile; "hosted" is the constrained environment.
DEPLOYMENT_PROFILES: dict[str, dict[str, object]] = {
    "local": {
        "analyzer_timeout_seconds": 60.0,
        "job_timeout_seconds": 90.0,
        "structural_timeout_seconds": 15.0,
        "ocr_timeout_seconds": 60.0,
        "ocr_page_timeout_seconds": 45.0,
        "ocr_max_pages": 3,
        "ocr_dpi": 200,
        "ocr_accept_partial": False,
        "max_input_characters": 100_000,
        "chunk_size": 50_000,
        "chunk_concurrency": 4,
        "retry_max_attempts": 3,
        "retry_delay_seconds": 1.0,
    },
    "hosted": {
        "analyzer_timeout_seconds": 120.0,
        "job_timeout_seconds": 180.0,
        "structural_timeout_seconds": 30.0,
        "ocr_timeout_seconds": 180.0,
        "ocr_page_timeout_seconds": 120.0,
        "ocr_max_pages": 2,
        "ocr_dpi": 150,
        "ocr_accept_partial": True,
        "max_input_characters": 40_000,
        "chunk_size": 15_000,
        "chunk_concurrency": 1,
        "retry_max_attempts": 2,
        "retry_delay_seconds": 2.0,
    },
}


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values listed in DEPLOYMENT_PROFILES default to the block selected by
    ``deployment_profile``; an explicit environment variable always wins.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    deployment_profile: DeploymentProfile = "local"

    storage_backend: str = "memory"
    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "policy_summarizer"
    db_username: str = "policy_summarizer"
    db_password: str = "secret"

    analyzer_provider: str = "openai"
    analyzer_api_key: str = ""
    analyzer_model_name: str = "gpt-4o"
    analyzer_base_url: str | None = None
    analyzer_temperature: float = 0.1

    analyzer_timeout_seconds: float = 60.0
    job_timeout_seconds: float = 90.0
    structural_timeout_seconds: float = 15.0
    ocr_timeout_seconds: float = 60.0
    ocr_page_timeout_seconds: float = 45.0
    ocr_max_pages: int = 3
    ocr_dpi: int = 200
    ocr_accept_partial: bool = False
    ocr_languages: str = "eng"
    max_input_characters: int = 100_000
    chunk_size: int = 50_000
    chunk_concurrency: int = 4
    retry_max_attempts: int = 3
    retry_delay_seconds: float = 1.0
    retry_exponential_backoff: bool = True

    min_extracted_characters: int = 20
    extracted_text_max_chars: int = 50_000
    analysis_strict: bool = False
    summary_length: Literal["detailed", "short"] = "detailed"
    max_upload_bytes: int = 10 * 1024 * 1024

    @model_validator(mode="before")
    @classmethod
    def _apply_profile_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        profile = str(data.get("deployment_profile", "local")).lower()
        defaults = DEPLOYMENT_PROFILES.get(profile)
        if defaults is None:
            return data
        return {**defaults, **data, "deployment_profile": profile}

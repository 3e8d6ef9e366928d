import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.3
    llm_max_output_tokens: int = 4096
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    # Input bounds
    max_resume_chars: int = 50000
    max_job_description_chars: int = 10000

    # External call budgets (seconds)
    llm_timeout_seconds: float = 20.0
    judge_timeout_seconds: float = 5.0

    # Keyword engine
    max_keywords: int = 20
    keyword_fuzzy_threshold: int = 88  # rapidfuzz ratio, 0-100
    keyword_fuzzy_min_length: int = 5  # shorter keywords never fuzzy-match

    # Suggestion judge
    judge_pass_threshold: int = 70
    judge_borderline_threshold: int = 50
    judge_concurrency: int = 5
    judge_trace: bool = False

    # Quality alerting thresholds
    quality_critical_pass_rate: float = 50.0
    quality_warning_pass_rate: float = 70.0
    quality_warning_avg_score: float = 65.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})

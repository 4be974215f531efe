import os
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from dotenv import load_dotenv

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_MODEL = "google-gla:gemini-flash-latest"


class ScoreWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    star: int = Field(2, description="Points per star across all repositories")
    repo: int = Field(2, description="Points per substantive repository")


# Both pairs have shipped; "balanced" is the default.
SCORE_WEIGHT_PRESETS: Dict[str, ScoreWeights] = {
    "balanced": ScoreWeights(star=2, repo=2),
    "star-heavy": ScoreWeights(star=5, repo=2),
}


def resolve_weights(name: str) -> ScoreWeights:
    try:
        return SCORE_WEIGHT_PRESETS[name]
    except KeyError:
        choices = ", ".join(sorted(SCORE_WEIGHT_PRESETS))
        raise ValueError(f"Unknown score weight preset '{name}' (choose from: {choices})")


class Settings(BaseModel):
    """Process-wide configuration, immutable once built."""
    model_config = ConfigDict(frozen=True)

    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_token: Optional[str] = None
    model_name: str = DEFAULT_MODEL
    score_weights: ScoreWeights = Field(default_factory=lambda: SCORE_WEIGHT_PRESETS["balanced"])
    evidence_max_repos: int = Field(20, ge=1, le=100)
    prompt_top_languages: int = Field(5, ge=1)
    fallback_top_languages: int = Field(3, ge=1)
    http_timeout: float = Field(15.0, gt=0)
    model_timeout: float = Field(60.0, gt=0)

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        load_dotenv()
        values = {
            "github_api_url": os.getenv("GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/"),
            "github_token": os.getenv("GITHUB_TOKEN") or None,
            "model_name": os.getenv("SKILLSCOPE_MODEL", DEFAULT_MODEL),
            "score_weights": resolve_weights(os.getenv("SKILLSCOPE_SCORE_WEIGHTS", "balanced")),
        }
        numeric = {
            "evidence_max_repos": "SKILLSCOPE_EVIDENCE_REPOS",
            "prompt_top_languages": "SKILLSCOPE_TOP_LANGUAGES",
            "http_timeout": "SKILLSCOPE_HTTP_TIMEOUT",
            "model_timeout": "SKILLSCOPE_MODEL_TIMEOUT",
        }
        for field, env_name in numeric.items():
            raw = os.getenv(env_name)
            if raw:
                values[field] = raw
        # CLI flags win over the environment
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

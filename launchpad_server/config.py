import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    """Runtime settings, read from the environment (and .env)."""

    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db: str = "launchpad"

    llm_api_key: Optional[str] = None
    llm_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    llm_model: str = "google/gemini-2.5-flash"

    # Matches must score strictly above this to be persisted
    score_threshold: float = Field(default=40.0, ge=0.0, le=100.0)
    top_k: int = Field(default=5, ge=1)
    scoring_concurrency: int = Field(default=1, ge=1)
    scoring_timeout: float = Field(default=30.0, gt=0.0)

    mentor_roles: list[str] = ["alumni", "faculty"]


def _env(name: str, default):
    value = os.getenv(name)
    return default if value in (None, "") else value


@lru_cache
def get_settings() -> Settings:
    defaults = Settings()
    return Settings(
        mongodb_url=_env("MONGODB_URL", defaults.mongodb_url),
        mongodb_db=_env("MONGODB_DB", defaults.mongodb_db),
        llm_api_key=_env("OPENROUTER_API_KEY", None),
        llm_api_url=_env("LLM_API_URL", defaults.llm_api_url),
        llm_model=_env("LLM_MODEL", defaults.llm_model),
        score_threshold=_env("MATCH_SCORE_THRESHOLD", defaults.score_threshold),
        top_k=_env("MATCH_TOP_K", defaults.top_k),
        scoring_concurrency=_env("MATCH_SCORING_CONCURRENCY", defaults.scoring_concurrency),
        scoring_timeout=_env("MATCH_SCORING_TIMEOUT", defaults.scoring_timeout),
    )

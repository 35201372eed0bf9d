import os
import sys
from pathlib import Path
from unittest.mock import patch

project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from launchpad_server.config import get_settings


def load(env: dict):
    get_settings.cache_clear()
    try:
        with patch.dict(os.environ, env, clear=True):
            return get_settings()
    finally:
        get_settings.cache_clear()


def test_defaults():
    settings = load({})
    assert settings.score_threshold == 40
    assert settings.top_k == 5
    assert settings.scoring_concurrency == 1
    assert settings.llm_api_key is None
    assert settings.mentor_roles == ["alumni", "faculty"]


def test_environment_overrides():
    settings = load({
        "OPENROUTER_API_KEY": "sk-live",
        "MATCH_SCORE_THRESHOLD": "55",
        "MATCH_TOP_K": "3",
        "MATCH_SCORING_CONCURRENCY": "4",
        "MATCH_SCORING_TIMEOUT": "12.5",
        "MONGODB_DB": "launchpad_test",
    })
    assert settings.llm_api_key == "sk-live"
    assert settings.score_threshold == 55.0
    assert settings.top_k == 3
    assert settings.scoring_concurrency == 4
    assert settings.scoring_timeout == 12.5
    assert settings.mongodb_db == "launchpad_test"


def test_blank_values_fall_back_to_defaults():
    settings = load({"MATCH_TOP_K": "", "OPENROUTER_API_KEY": ""})
    assert settings.top_k == 5
    assert settings.llm_api_key is None


if __name__ == "__main__":
    for fn in (test_defaults, test_environment_overrides, test_blank_values_fall_back_to_defaults):
        fn()
        print(f"  PASS: {fn.__name__}")

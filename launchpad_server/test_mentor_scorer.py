"""Tests for the LLM scoring call. No network: httpx.MockTransport serves replies."""

import asyncio
import json
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import httpx

from launchpad_server.config import Settings
from launchpad_server.exceptions import ScoringCallFailure
from launchpad_server.models.idea import Idea
from launchpad_server.models.mentor import MentorProfile
from launchpad_server.services.mentor_scorer import (
    SYSTEM_PROMPT,
    build_prompt,
    parse_score,
    score_mentor,
)

SETTINGS = Settings(llm_api_key="sk-test", llm_model="test/model", scoring_timeout=5)

IDEA = Idea(
    id="idea-1",
    user_id="student-1",
    title="Campus carpool",
    tags=["Mobility"],
    tech_stack=[],
    stage="mvp",
)

MENTOR = MentorProfile(
    user_id="mentor-1",
    full_name="Priya Raman",
    startup_name="RideKit",
    startup_domain="Mobility",
    tech_stack=["Flutter", "Firebase"],
    expertise=["Mobile"],
    help_areas=["Product Guidance"],
    mentorship_availability=True,
)

GOOD_REPLY = {
    "domain_match_score": 90,
    "tech_match_score": 55,
    "stage_match_score": 70,
    "overall_score": 78,
    "match_reason": "Built a mobility startup past MVP.",
}


def completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def call(handler) -> object:
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await score_mentor(client, IDEA, MENTOR, SETTINGS)

    return asyncio.run(_run())


def expect_failure(handler):
    try:
        call(handler)
    except ScoringCallFailure:
        return
    raise AssertionError("expected ScoringCallFailure")


def test_build_prompt_lists_idea_and_mentor():
    prompt = build_prompt(IDEA, MENTOR)
    assert "- Title: Campus carpool" in prompt
    assert "- Domain/Tags: Mobility" in prompt
    assert "- Tech Stack: Not specified" in prompt
    assert "- Stage: mvp" in prompt
    assert "- Name: Priya Raman" in prompt
    assert "- Tech Stack: Flutter, Firebase" in prompt
    assert "- Help Areas: Product Guidance" in prompt
    assert "- Availability: Available" in prompt
    assert '"overall_score": <number>' in prompt


def test_parse_score_strips_markdown_fences():
    score = parse_score("```json\n" + json.dumps(GOOD_REPLY) + "\n```")
    assert score.overall_score == 78
    assert score.match_reason.startswith("Built")


def test_parse_score_rejects_bad_payloads():
    bad = [
        "not json",
        json.dumps({"overall_score": 80}),
        json.dumps({**GOOD_REPLY, "overall_score": 140}),
        json.dumps([GOOD_REPLY]),
        None,
    ]
    for content in bad:
        try:
            parse_score(content)
        except ScoringCallFailure:
            continue
        raise AssertionError(f"accepted {content!r}")


def test_score_mentor_sends_structured_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion(json.dumps(GOOD_REPLY)))

    score = call(handler)

    assert score.overall_score == 78
    assert seen["auth"] == "Bearer sk-test"
    body = seen["body"]
    assert body["model"] == "test/model"
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert body["messages"][1]["role"] == "user"


def test_non_success_status_is_failure():
    expect_failure(lambda request: httpx.Response(429, json={"error": "rate limited"}))


def test_timeout_is_failure():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    expect_failure(handler)


def test_unexpected_body_is_failure():
    expect_failure(lambda request: httpx.Response(200, json={"choices": []}))
    expect_failure(lambda request: httpx.Response(200, text="<html>oops</html>"))


if __name__ == "__main__":
    tests = [fn for name, fn in sorted(globals().items()) if name.startswith("test_")]
    for fn in tests:
        fn()
        print(f"  PASS: {fn.__name__}")
    print(f"\nAll {len(tests)} tests passed!")

"""Score one idea/mentor pair with a chat-completions LLM call."""

import json
import re

import httpx
from pydantic import ValidationError

from launchpad_server.config import Settings
from launchpad_server.exceptions import ScoringCallFailure
from launchpad_server.models.idea import Idea
from launchpad_server.models.matching import MentorScore
from launchpad_server.models.mentor import MentorProfile

SYSTEM_PROMPT = (
    "You are a mentor-matching expert. Analyze domain fit, technical alignment, "
    "and experience relevance."
)


def _join(items: list[str]) -> str:
    return ", ".join(items) or "Not specified"


def build_prompt(idea: Idea, mentor: MentorProfile) -> str:
    return f"""Score this mentor-student match (0-100) based on:

Startup Idea:
- Title: {idea.title}
- Domain/Tags: {_join(idea.tags)}
- Tech Stack: {_join(idea.tech_stack)}
- Stage: {idea.stage.value}

Mentor Profile:
- Name: {mentor.full_name or 'Unknown'}
- Startup: {mentor.startup_name or 'Not specified'}
- Domain: {mentor.startup_domain or 'Not specified'}
- Tech Stack: {_join(mentor.tech_stack)}
- Expertise: {_join(mentor.expertise)}
- Help Areas: {_join(mentor.help_areas)}
- Availability: {'Available' if mentor.mentorship_availability else 'Limited'}

Provide:
1. Domain Match Score (0-100) - How well do their domains align?
2. Tech Match Score (0-100) - How well do their tech stacks overlap?
3. Stage Match Score (0-100) - Does mentor's experience match the idea stage?
4. Overall Score (0-100) - Weighted average
5. Match Reason - 2-3 sentences explaining why this is a good (or bad) match

Return ONLY valid JSON in this shape. No markdown fences.
{{
  "domain_match_score": <number>,
  "tech_match_score": <number>,
  "stage_match_score": <number>,
  "overall_score": <number>,
  "match_reason": "<string>"
}}"""


def parse_score(content: str) -> MentorScore:
    """Parse the model's reply into a MentorScore, tolerating markdown fences."""
    if not isinstance(content, str):
        raise ScoringCallFailure("Empty completion")
    content = re.sub(r"^```(?:json)?\s*", "", content.strip())
    content = re.sub(r"\s*```$", "", content.strip())
    try:
        return MentorScore(**json.loads(content))
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        raise ScoringCallFailure(f"Malformed score: {e}") from e


async def score_mentor(
    client: httpx.AsyncClient,
    idea: Idea,
    mentor: MentorProfile,
    settings: Settings,
) -> MentorScore:
    """Ask the LLM to score one idea/mentor pair.

    Raises ScoringCallFailure on transport errors, timeouts, non-2xx
    responses and replies that do not parse into a MentorScore.
    """
    try:
        resp = await client.post(
            settings.llm_api_url,
            headers={
                "Authorization": f"Bearer {settings.llm_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": settings.llm_model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(idea, mentor)},
                ],
                "response_format": {"type": "json_object"},
            },
            timeout=settings.scoring_timeout,
        )
        resp.raise_for_status()
        content = resp.json()["choices"][0]["message"]["content"]
    except httpx.HTTPError as e:
        raise ScoringCallFailure(f"Scoring request failed: {e}") from e
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ScoringCallFailure(f"Unexpected completion body: {e}") from e

    return parse_score(content)

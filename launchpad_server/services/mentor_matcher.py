"""Find, score, rank and persist mentor matches for a startup idea.

The pipeline is a single pass with no state kept between calls:

    idea -> role/profile lookup -> pre-filter -> LLM scoring -> rank -> insert

Retrying a failed call redoes the whole pipeline.
"""

import asyncio
import logging
from typing import Optional

import httpx
from pymongo.errors import PyMongoError

from launchpad_server.config import Settings, get_settings
from launchpad_server.exceptions import (
    IdeaNotFound,
    PersistenceFailure,
    ScoringCallFailure,
    ScoringUnavailable,
    UpstreamQueryFailure,
)
from launchpad_server.models.idea import Idea, get_idea
from launchpad_server.models.matching import (
    MatchResult,
    MentorScore,
    build_match_doc,
    insert_matches,
)
from launchpad_server.models.mentor import (
    MentorProfile,
    get_available_mentors,
    get_mentor_user_ids,
)
from launchpad_server.services.mentor_scorer import score_mentor

logger = logging.getLogger(__name__)

ScoredCandidate = tuple[MentorProfile, MentorScore]


# ── Pre-filter ──────────────────────────────────────────────────────────


def _overlaps(keywords: list[str], targets: list[str]) -> bool:
    """True if any keyword contains, or is contained in, any target (case-insensitive)."""
    for kw in keywords:
        kw = kw.lower()
        for target in targets:
            target = target.lower()
            if kw in target or target in kw:
                return True
    return False


def prefilter_candidates(idea: Idea, candidates: list[MentorProfile]) -> list[MentorProfile]:
    """Cheap, over-inclusive narrowing of candidates before scoring.

    A mentor is kept if they declared no domain preferences, or a domain
    preference overlaps an idea tag, or an expertise keyword overlaps the
    idea's tech stack. Order is preserved.
    """
    return [
        mentor
        for mentor in candidates
        if not mentor.domain_preferences
        or _overlaps(mentor.domain_preferences, idea.tags)
        or _overlaps(mentor.expertise, idea.tech_stack)
    ]


# ── Ranking ─────────────────────────────────────────────────────────────


def rank_matches(scored: list[ScoredCandidate], threshold: float, top_k: int) -> list[ScoredCandidate]:
    """Drop scores at or below threshold, then keep the top_k best.

    sorted() is stable, so equal scores keep candidate order.
    """
    eligible = [pair for pair in scored if pair[1].overall_score > threshold]
    eligible = sorted(eligible, key=lambda pair: pair[1].overall_score, reverse=True)
    return eligible[:top_k]


# ── Scoring ─────────────────────────────────────────────────────────────


async def score_candidates(
    client: httpx.AsyncClient,
    idea: Idea,
    candidates: list[MentorProfile],
    settings: Settings,
) -> list[ScoredCandidate]:
    """Score every candidate, skipping the ones whose call fails.

    At most settings.scoring_concurrency requests are in flight; with the
    default of 1 they go out one after another in candidate order.
    """
    semaphore = asyncio.Semaphore(settings.scoring_concurrency)

    async def _score(mentor: MentorProfile) -> Optional[ScoredCandidate]:
        async with semaphore:
            try:
                score = await score_mentor(client, idea, mentor, settings)
            except ScoringCallFailure as e:
                logger.warning(f"Skipping mentor {mentor.user_id}: {e}")
                return None
        return mentor, score

    results = await asyncio.gather(*(_score(m) for m in candidates))
    return [r for r in results if r is not None]


# ── Pipeline ────────────────────────────────────────────────────────────


async def _load_candidates(roles: list[str]) -> list[MentorProfile]:
    try:
        mentor_ids = await get_mentor_user_ids(roles)
        if not mentor_ids:
            logger.info(f"No mentors found with roles {', '.join(roles)}")
            return []
        return await get_available_mentors(mentor_ids)
    except PyMongoError as e:
        raise UpstreamQueryFailure(f"Failed to load mentor candidates: {e}") from e


async def score_matches(
    idea_id: str,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> list[MatchResult]:
    """Match an idea against the mentor pool and persist the best matches.

    Returns the persisted MatchResults, best first; empty when no mentor
    is eligible or none scores above the threshold.
    """
    settings = settings or get_settings()

    try:
        idea = await get_idea(idea_id)
    except PyMongoError as e:
        raise UpstreamQueryFailure(f"Failed to load idea {idea_id}: {e}") from e
    if idea is None:
        raise IdeaNotFound(idea_id)

    candidates = await _load_candidates(settings.mentor_roles)
    relevant = prefilter_candidates(idea, candidates)
    logger.info(
        f"Found {len(relevant)} relevant mentors out of {len(candidates)} total mentors "
        f"for idea {idea_id}"
    )
    if not relevant:
        return []

    if not settings.llm_api_key:
        raise ScoringUnavailable("OPENROUTER_API_KEY is not set")

    if client is None:
        async with httpx.AsyncClient(timeout=settings.scoring_timeout) as own_client:
            scored = await score_candidates(own_client, idea, relevant, settings)
    else:
        scored = await score_candidates(client, idea, relevant, settings)

    top = rank_matches(scored, settings.score_threshold, settings.top_k)
    logger.info(
        f"Scored {len(scored)}/{len(relevant)} mentors for idea {idea_id}, "
        f"persisting {len(top)}"
    )
    if not top:
        return []

    docs = [
        build_match_doc(idea.id, idea.user_id, mentor.user_id, score)
        for mentor, score in top
    ]
    try:
        return await insert_matches(docs)
    except PyMongoError as e:
        raise PersistenceFailure(f"Failed to save matches for idea {idea_id}: {e}") from e

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from launchpad_server.db import get_db


class MentorScore(BaseModel):
    """What the LLM returns for one idea/mentor pair."""
    domain_match_score: float = Field(ge=0, le=100)
    tech_match_score: float = Field(ge=0, le=100)
    stage_match_score: float = Field(ge=0, le=100)
    overall_score: float = Field(ge=0, le=100)
    match_reason: str


class MatchResult(BaseModel):
    """Persisted outcome of scoring one idea/mentor pair."""
    id: str
    idea_id: str
    mentor_id: str
    student_id: str
    domain_match_score: float
    tech_match_score: float
    stage_match_score: float
    overall_score: float
    match_reason: str
    created_at: datetime


class MatchRequest(BaseModel):
    """Body of POST /match-mentors."""
    idea_id: str = Field(alias="ideaId")


def build_match_doc(idea_id: str, student_id: str, mentor_id: str, score: MentorScore) -> dict:
    return {
        "id": str(uuid4()),
        "idea_id": idea_id,
        "mentor_id": mentor_id,
        "student_id": student_id,
        **score.model_dump(),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


async def insert_matches(docs: list[dict]) -> list[MatchResult]:
    """Bulk insert match documents and return them as stored."""
    if not docs:
        return []
    db = get_db()
    await db.mentor_matches.insert_many(docs)
    for doc in docs:
        # insert_many adds _id in place
        doc.pop("_id", None)
    return [MatchResult(**doc) for doc in docs]


async def get_match(match_id: str) -> MatchResult | None:
    db = get_db()
    doc = await db.mentor_matches.find_one({"id": match_id}, {"_id": 0})
    if doc is None:
        return None
    return MatchResult(**doc)


async def get_matches_for_idea(idea_id: str) -> list[MatchResult]:
    """All persisted matches of an idea, best first."""
    db = get_db()
    cursor = db.mentor_matches.find({"idea_id": idea_id}, {"_id": 0}).sort(
        [("overall_score", -1), ("created_at", 1)]
    )
    docs = await cursor.to_list(length=200)
    return [MatchResult(**doc) for doc in docs]

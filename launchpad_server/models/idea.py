from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel

from launchpad_server.db import get_db


class IdeaStage(str, Enum):
    idea = "idea"
    poc = "poc"
    mvp = "mvp"


class Idea(BaseModel):
    """Startup idea as stored in MongoDB."""
    id: str
    user_id: str
    title: str
    problem: Optional[str] = None
    solution: Optional[str] = None
    target_user: Optional[str] = None
    tags: list[str] = []
    tech_stack: list[str] = []
    stage: IdeaStage = IdeaStage.idea
    created_at: Optional[datetime] = None


class IdeaCreate(BaseModel):
    """Body of POST /ideas. The domain becomes the idea's only tag."""
    user_id: str
    title: str
    problem: str
    solution: str
    target_user: str
    domain: str
    tech_stack: list[str] = []


# ── CRUD ────────────────────────────────────────────────────────────────


async def create_idea(data: IdeaCreate) -> Idea:
    """Insert a new idea at the first stage and return it."""
    db = get_db()
    fields = data.model_dump(exclude={"domain"})
    doc = {
        "id": str(uuid4()),
        **fields,
        "tags": [data.domain],
        "stage": IdeaStage.idea.value,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    await db.startup_ideas.insert_one(doc)
    doc.pop("_id", None)
    return Idea(**doc)


async def get_idea(idea_id: str) -> Optional[Idea]:
    """Fetch a single idea by id. Returns None if not found."""
    db = get_db()
    doc = await db.startup_ideas.find_one({"id": idea_id}, {"_id": 0})
    if doc is None:
        return None
    # Nullable array columns come back as None
    doc["tags"] = doc.get("tags") or []
    doc["tech_stack"] = doc.get("tech_stack") or []
    doc["stage"] = doc.get("stage") or IdeaStage.idea.value
    return Idea(**doc)

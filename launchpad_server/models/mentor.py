from typing import Optional

from pydantic import BaseModel, field_validator

from launchpad_server.db import get_db


class MentorProfile(BaseModel):
    """The slice of a user profile the matcher reads. Never written here."""
    user_id: str
    full_name: Optional[str] = None
    startup_name: Optional[str] = None
    startup_domain: Optional[str] = None
    tech_stack: list[str] = []
    expertise: list[str] = []
    help_areas: list[str] = []
    domain_preferences: list[str] = []
    mentorship_availability: bool = False

    @field_validator("tech_stack", "expertise", "help_areas", "domain_preferences", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


async def get_mentor_user_ids(roles: list[str]) -> list[str]:
    """User ids holding any of the given roles, deduplicated, in store order."""
    db = get_db()
    docs = await db.user_roles.find(
        {"role": {"$in": roles}}, {"user_id": 1, "_id": 0}
    ).to_list(None)
    return list(dict.fromkeys(d["user_id"] for d in docs))


async def get_available_mentors(user_ids: list[str]) -> list[MentorProfile]:
    """Profiles of the given users that are available and have a startup filled in."""
    db = get_db()
    docs = await db.profiles.find(
        {
            "user_id": {"$in": user_ids},
            "mentorship_availability": True,
            "startup_name": {"$nin": [None, ""]},
            "startup_domain": {"$nin": [None, ""]},
        },
        {"_id": 0},
    ).to_list(None)
    return [MentorProfile(**doc) for doc in docs]


async def get_full_name(user_id: str) -> Optional[str]:
    db = get_db()
    doc = await db.profiles.find_one({"user_id": user_id}, {"full_name": 1, "_id": 0})
    if doc is None:
        return None
    return doc.get("full_name")

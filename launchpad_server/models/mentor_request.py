from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel

from launchpad_server.db import get_db


class RequestStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


# ── Request / response schemas ──────────────────────────────────────────


class MentorRequest(BaseModel):
    """Full mentorship request document as stored in MongoDB."""
    id: str
    student_id: str
    mentor_id: str
    idea_id: str
    match_id: str
    message: Optional[str] = None
    status: RequestStatus = RequestStatus.pending
    mentor_feedback: Optional[str] = None
    channel_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class MentorRequestCreate(BaseModel):
    """Body of POST /mentor-requests."""
    student_id: str
    mentor_id: str
    idea_id: str
    match_id: str
    message: Optional[str] = None


class MentorRequestResponse(BaseModel):
    """Body of POST /mentor-requests/{request_id}/respond."""
    status: RequestStatus
    feedback: Optional[str] = None


class MentorRequestList(BaseModel):
    requests: list[MentorRequest]


# ── CRUD ────────────────────────────────────────────────────────────────


async def create_mentor_request(data: MentorRequestCreate) -> MentorRequest:
    db = get_db()
    doc = {
        "id": str(uuid4()),
        **data.model_dump(),
        "status": RequestStatus.pending.value,
        "mentor_feedback": None,
        "channel_id": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "updated_at": None,
    }
    await db.mentor_requests.insert_one(doc)
    doc.pop("_id", None)
    return MentorRequest(**doc)


async def get_mentor_request(request_id: str) -> Optional[MentorRequest]:
    db = get_db()
    doc = await db.mentor_requests.find_one({"id": request_id}, {"_id": 0})
    if doc is None:
        return None
    return MentorRequest(**doc)


async def get_requests_for(field: str, uid: str) -> list[MentorRequest]:
    """Requests where `field` (mentor_id or student_id) is uid, newest first."""
    db = get_db()
    cursor = db.mentor_requests.find({field: uid}, {"_id": 0}).sort("created_at", -1)
    docs = await cursor.to_list(length=200)
    return [MentorRequest(**doc) for doc in docs]


async def set_request_status(
    request_id: str,
    status: RequestStatus,
    feedback: Optional[str],
) -> Optional[MentorRequest]:
    """Answer a request. Returns None if it has already been answered.

    An accepted request whose channel was never created can be accepted
    again, so a retry can finish opening the channel.
    """
    db = get_db()
    now = datetime.now(timezone.utc).isoformat()
    answerable = [{"status": RequestStatus.pending.value}]
    if status == RequestStatus.accepted:
        answerable.append({"status": RequestStatus.accepted.value, "channel_id": None})
    result = await db.mentor_requests.find_one_and_update(
        {"id": request_id, "$or": answerable},
        {"$set": {"status": status.value, "mentor_feedback": feedback, "updated_at": now}},
        return_document=True,
    )
    if result is None:
        return None
    result.pop("_id", None)
    return MentorRequest(**result)


async def set_request_channel(request_id: str, channel_id: str) -> Optional[MentorRequest]:
    db = get_db()
    result = await db.mentor_requests.find_one_and_update(
        {"id": request_id},
        {"$set": {"channel_id": channel_id}},
        return_document=True,
    )
    if result is None:
        return None
    result.pop("_id", None)
    return MentorRequest(**result)

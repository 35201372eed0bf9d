from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel

from launchpad_server.db import get_db


class Channel(BaseModel):
    """Lounge channel document. Only created here; chat lives elsewhere."""
    id: str
    name: str
    type: str
    description: str | None = None
    created_by: str
    created_at: datetime


async def create_channel_with_member(
    name: str,
    channel_type: str,
    description: str,
    created_by: str,
    member_uid: str,
) -> Channel:
    """Create a lounge channel and add one member to it."""
    db = get_db()
    now = datetime.now(timezone.utc).isoformat()
    doc = {
        "id": str(uuid4()),
        "name": name,
        "type": channel_type,
        "description": description,
        "created_by": created_by,
        "created_at": now,
    }
    await db.lounge_channels.insert_one(doc)
    doc.pop("_id", None)

    await db.channel_members.insert_one(
        {"channel_id": doc["id"], "user_id": member_uid, "joined_at": now}
    )
    return Channel(**doc)

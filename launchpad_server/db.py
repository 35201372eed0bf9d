from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from launchpad_server.config import get_settings

client: AsyncIOMotorClient | None = None
db: AsyncIOMotorDatabase | None = None


async def connect_db() -> AsyncIOMotorDatabase:
    global client, db
    settings = get_settings()
    client = AsyncIOMotorClient(settings.mongodb_url)
    db = client[settings.mongodb_db]

    # Lookups are by our own string ids, never by _id
    await db.startup_ideas.create_index("id", unique=True)
    await db.mentor_matches.create_index("id", unique=True)
    await db.mentor_matches.create_index("idea_id")
    await db.mentor_requests.create_index("id", unique=True)
    await db.mentor_requests.create_index("mentor_id")
    await db.mentor_requests.create_index("student_id")
    await db.lounge_channels.create_index("id", unique=True)
    await db.channel_members.create_index(
        [("channel_id", 1), ("user_id", 1)], unique=True
    )
    await db.profiles.create_index("user_id")
    await db.user_roles.create_index("user_id")

    return db


async def close_db() -> None:
    global client
    if client:
        client.close()


def get_db() -> AsyncIOMotorDatabase:
    assert db is not None, "Database not connected. Call connect_db() first."
    return db

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from pymongo.errors import PyMongoError

load_dotenv()

from launchpad_server.db import connect_db, close_db
from launchpad_server.exceptions import (
    MentorRequestFailure,
    PersistenceFailure,
    ServiceException,
    service_exception_handler,
)
from launchpad_server.models.channel import create_channel_with_member
from launchpad_server.models.idea import Idea, IdeaCreate, create_idea, get_idea
from launchpad_server.models.matching import (
    MatchRequest,
    MatchResult,
    get_match,
    get_matches_for_idea,
)
from launchpad_server.models.mentor import get_full_name
from launchpad_server.models.mentor_request import (
    MentorRequest,
    MentorRequestCreate,
    MentorRequestList,
    MentorRequestResponse,
    RequestStatus,
    create_mentor_request,
    get_mentor_request,
    get_requests_for,
    set_request_channel,
    set_request_status,
)
from launchpad_server.services.mentor_matcher import score_matches

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_db()
    yield
    await close_db()


app = FastAPI(title="Launchpad API", lifespan=lifespan)
app.add_exception_handler(ServiceException, service_exception_handler)

# Called straight from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# ── Idea submission ────────────────────────────────────────────────────


class IdeaSubmission(BaseModel):
    idea: Idea
    matches: list[MatchResult]


@app.post("/ideas", response_model=IdeaSubmission, status_code=201)
async def submit_idea(body: IdeaCreate):
    try:
        idea = await create_idea(body)
    except PyMongoError as e:
        raise PersistenceFailure(f"Failed to save idea: {e}") from e

    # Matching must not block the submission
    try:
        matches = await score_matches(idea.id)
    except ServiceException as e:
        logger.error(f"Mentor matching failed for idea {idea.id}: {e}")
        matches = []

    return IdeaSubmission(idea=idea, matches=matches)


# ── Mentor matching ────────────────────────────────────────────────────


@app.post("/match-mentors", response_model=list[MatchResult])
async def match_mentors(body: MatchRequest):
    return await score_matches(body.idea_id)


@app.get("/ideas/{idea_id}/matches", response_model=list[MatchResult])
async def list_idea_matches(idea_id: str):
    idea = await get_idea(idea_id)
    if idea is None:
        raise HTTPException(status_code=404, detail="Idea not found")
    return await get_matches_for_idea(idea_id)


# ── Mentorship requests ────────────────────────────────────────────────


@app.post("/mentor-requests", response_model=MentorRequest, status_code=201)
async def request_mentorship(body: MentorRequestCreate):
    match = await get_match(body.match_id)
    if match is None or match.mentor_id != body.mentor_id or match.idea_id != body.idea_id:
        raise HTTPException(status_code=404, detail="Match not found")
    return await create_mentor_request(body)


@app.get("/mentors/{mentor_id}/requests", response_model=MentorRequestList)
async def list_mentor_requests(mentor_id: str):
    return MentorRequestList(requests=await get_requests_for("mentor_id", mentor_id))


@app.get("/students/{student_id}/requests", response_model=MentorRequestList)
async def list_student_requests(student_id: str):
    return MentorRequestList(requests=await get_requests_for("student_id", student_id))


@app.post("/mentor-requests/{request_id}/respond", response_model=MentorRequest)
async def respond_to_request(request_id: str, body: MentorRequestResponse):
    if body.status == RequestStatus.pending:
        raise HTTPException(status_code=400, detail="Status must be accepted or rejected")

    existing = await get_mentor_request(request_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Request not found")

    try:
        request = await set_request_status(request_id, body.status, body.feedback)
        if request is None:
            raise HTTPException(status_code=409, detail="Request already answered")

        if request.status == RequestStatus.accepted:
            # Open a mentorship channel in the lounge for the pair
            idea = await get_idea(request.idea_id)
            idea_title = idea.title if idea else "Startup idea"
            student_name = await get_full_name(request.student_id) or "Student"

            channel = await create_channel_with_member(
                name=f"{student_name} & {idea_title}",
                channel_type="startups",
                description=f"Mentorship channel for {idea_title}",
                created_by=request.mentor_id,
                member_uid=request.student_id,
            )
            request = await set_request_channel(request_id, channel.id) or request
            logger.info(f"Request {request_id} accepted, channel {channel.id} created")
    except PyMongoError as e:
        raise MentorRequestFailure(f"Failed to answer request {request_id}: {e}") from e

    return request

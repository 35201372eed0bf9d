"""Service-layer errors and the handler that turns them into JSON responses."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""
    status_code = 500


class IdeaNotFound(ServiceException):
    """Raised when the idea being matched does not exist."""

    def __init__(self, idea_id: str):
        super().__init__(f"Idea {idea_id} not found")
        self.idea_id = idea_id


class UpstreamQueryFailure(ServiceException):
    """Raised when the role or profile store cannot be read."""


class PersistenceFailure(ServiceException):
    """Raised when the top matches cannot be written."""


class MentorRequestFailure(ServiceException):
    """Raised when a mentorship request cannot be answered or its channel opened."""


class ScoringUnavailable(ServiceException):
    """Raised when candidates need scoring but no LLM API key is configured."""


class ScoringCallFailure(ServiceException):
    """A single candidate's scoring request failed. Never leaves the batch."""


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    logger.error(f"Service error in {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc), "type": exc.__class__.__name__},
    )

"""
Client feedback tokens

A token is valid while it exists, has not expired and, unless the request
allows several answers, has not been answered yet.
"""
import re
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, ConflictException, GoneException
from app.core.timeutils import is_expired
from app.crud import feedback_request_crud
from app.models.feedback import FeedbackRequest

_TAGS = re.compile(r"<[^>]*>")

INVALID_LINK = "Invalid link. Ask the recruiter for a new one."
EXPIRED_LINK = "This link has expired. Ask the recruiter for a new one."
ALREADY_ANSWERED = "Feedback was already sent for this link."


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return _TAGS.sub("", text).strip()


async def resolve_token(db: AsyncSession, token: str) -> FeedbackRequest:
    feedback_request = await feedback_request_crud.get_by_token(db, (token or "").strip())
    if feedback_request is None:
        raise BadRequestException(INVALID_LINK)
    if is_expired(feedback_request.expires_at):
        raise GoneException(EXPIRED_LINK)
    # answered_at survives a soft delete of the answer itself
    if not feedback_request.allow_multiple and feedback_request.answered_at is not None:
        raise ConflictException(ALREADY_ANSWERED)
    return feedback_request

"""
Share link rules

Tokens, optional password protection and the checks a public request must
pass before a link is honoured
"""
import hashlib
import secrets
from typing import Optional

from app.core.config import settings
from app.core.exceptions import (
    GoneException,
    NotFoundException,
    UnauthorizedException,
)
from app.core.timeutils import is_expired
from app.models.share_link import ShareLink, LinkType

PUBLIC_PATHS = {
    LinkType.APPLICATION.value: "share",
    LinkType.CLIENT_VIEW.value: "client-view",
}


def generate_token() -> str:
    return secrets.token_urlsafe(settings.share_link_token_bytes)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def share_url(link: ShareLink) -> str:
    return f"{settings.public_base_url}/{PUBLIC_PATHS[link.link_type]}/{link.token}"


def check_link(
    link: Optional[ShareLink],
    link_type: LinkType,
    password: Optional[str] = None,
    submitting: bool = False,
) -> ShareLink:
    """Raise the error a public caller should see, or return the usable link"""
    if link is None or link.deleted or link.link_type != link_type.value:
        raise NotFoundException("Link not found")
    if not link.active:
        raise GoneException("This link has been disabled")
    if is_expired(link.expires_at):
        raise GoneException("This link has expired")
    if submitting and link.max_submissions is not None and link.submissions_count >= link.max_submissions:
        raise GoneException("This link has reached its submission limit")
    if link.password_hash:
        if not password:
            raise UnauthorizedException("This link is password protected")
        if not secrets.compare_digest(hash_password(password), link.password_hash):
            raise UnauthorizedException("Wrong password")
    return link

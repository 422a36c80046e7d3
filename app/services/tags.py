"""
Tagging rules
"""
import re
import unicodedata

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import tag_crud
from app.models.tag import APPLICATION_REASON_PREFIX

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(label: str) -> str:
    """"Sênior Python" -> "senior-python" """
    ascii_label = unicodedata.normalize("NFKD", label).encode("ascii", "ignore").decode()
    return _NON_SLUG.sub("-", ascii_label.lower()).strip("-")


def application_reason(job_id: str) -> str:
    return f"{APPLICATION_REASON_PREFIX}{job_id}"


async def inherit_job_tags(db: AsyncSession, *, job_id: str, candidate_id: str) -> int:
    """Copy a job's tags onto a candidate who applied to it"""
    tags = await tag_crud.job_tags(db, job_id)
    return await tag_crud.add_candidate_tags(
        db,
        candidate_id,
        [t.id for t in tags],
        added_reason=application_reason(job_id),
    )

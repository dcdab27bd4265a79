# src/phoenix_blog/api/v1/endpoints/tags.py
"""Tag listing endpoint."""

from fastapi import APIRouter

from phoenix_blog.api.v1.dependencies import SessionDep
from phoenix_blog.services.tags import list_used_tag_names

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=list[str])
async def list_tags(db: SessionDep) -> list[str]:
    """List tags in use, most used first."""
    return list_used_tag_names(db)

# studybuddy/api/routes_discussions.py
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import desc, func, select

from studybuddy.models.catalog import Course
from studybuddy.models.discussion import Comment, Discussion
from studybuddy.services.comment_tree import build_comment_tree
from studybuddy.services.db import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


class DiscussionReq(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    content: str = Field(..., min_length=1)
    authorId: str = Field(..., min_length=1, max_length=128)
    courseId: Optional[uuid.UUID] = None


class CommentReq(BaseModel):
    content: str = Field(..., min_length=1)
    authorId: str = Field(..., min_length=1, max_length=128)
    parentId: Optional[uuid.UUID] = None


def _discussion_to_dict(d: Discussion, replies: int = 0) -> Dict[str, Any]:
    return {
        "id": str(d.id),
        "title": d.title,
        "content": d.content,
        "author_id": d.author_id,
        "course_id": str(d.course_id) if d.course_id else None,
        "likes": d.likes,
        "replies": replies,
        "created_at": d.created_at,
    }


def _comment_to_dict(c: Comment) -> Dict[str, Any]:
    return {
        "id": str(c.id),
        "discussion_id": str(c.discussion_id),
        "parent_id": str(c.parent_id) if c.parent_id else None,
        "content": c.content,
        "author_id": c.author_id,
        "created_at": c.created_at,
    }


def _fetch_comments(s, discussion_id: uuid.UUID) -> List[Comment]:
    # all comments of a discussion in one batch, oldest first
    return s.execute(
        select(Comment)
        .where(Comment.discussion_id == discussion_id)
        .order_by(Comment.created_at)
    ).scalars().all()


def _get_discussion(s, discussion_id: uuid.UUID) -> Discussion:
    d = s.get(Discussion, discussion_id)
    if not d:
        raise HTTPException(status_code=404, detail="Discussion not found")
    return d


@router.get("")
def list_discussions(courseId: Optional[uuid.UUID] = None,
                     limit: int = Query(50, ge=1, le=200)) -> List[Dict[str, Any]]:
    with get_session() as s:
        counts = (
            select(Comment.discussion_id, func.count(Comment.id).label("n"))
            .group_by(Comment.discussion_id)
            .subquery()
        )
        stmt = (
            select(Discussion, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.discussion_id == Discussion.id)
            .order_by(desc(Discussion.created_at))
            .limit(limit)
        )
        if courseId:
            stmt = stmt.filter(Discussion.course_id == courseId)
        return [_discussion_to_dict(d, n) for d, n in s.execute(stmt).all()]


@router.post("", status_code=201)
def create_discussion(body: DiscussionReq) -> Dict[str, Any]:
    with get_session() as s:
        if body.courseId and not s.get(Course, body.courseId):
            raise HTTPException(status_code=404, detail="Course not found")
        d = Discussion(
            title=body.title.strip(),
            content=body.content.strip(),
            author_id=body.authorId,
            course_id=body.courseId,
        )
        s.add(d)
        s.commit()
        s.refresh(d)
        return _discussion_to_dict(d)


@router.get("/{discussion_id}")
def get_discussion(discussion_id: uuid.UUID) -> Dict[str, Any]:
    with get_session() as s:
        d = _get_discussion(s, discussion_id)
        comments = _fetch_comments(s, discussion_id)
        out = _discussion_to_dict(d, replies=len(comments))
        out["comments"] = [n.to_dict() for n in build_comment_tree(comments)]
        return out


@router.post("/{discussion_id}/like")
def like_discussion(discussion_id: uuid.UUID) -> Dict[str, Any]:
    with get_session() as s:
        d = _get_discussion(s, discussion_id)
        d.likes = Discussion.likes + 1
        s.commit()
        s.refresh(d)
        return {"id": str(d.id), "likes": d.likes}


@router.get("/{discussion_id}/comments")
def list_comments(discussion_id: uuid.UUID) -> List[Dict[str, Any]]:
    """Comments of a discussion as a reply tree (roots oldest first)."""
    with get_session() as s:
        _get_discussion(s, discussion_id)
        return [n.to_dict() for n in build_comment_tree(_fetch_comments(s, discussion_id))]


@router.post("/{discussion_id}/comments", status_code=201)
def add_comment(discussion_id: uuid.UUID, body: CommentReq) -> Dict[str, Any]:
    with get_session() as s:
        _get_discussion(s, discussion_id)
        if body.parentId is not None:
            parent = s.get(Comment, body.parentId)
            if not parent or parent.discussion_id != discussion_id:
                raise HTTPException(
                    status_code=422,
                    detail="parentId must reference a comment in the same discussion",
                )
        c = Comment(
            discussion_id=discussion_id,
            parent_id=body.parentId,
            content=body.content.strip(),
            author_id=body.authorId,
        )
        s.add(c)
        s.commit()
        s.refresh(c)
        logger.info("[DISCUSSION] comment %s on %s (parent=%s)", c.id, discussion_id, c.parent_id)
        return _comment_to_dict(c)

# studybuddy/api/routes_resources.py
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import desc, select

from studybuddy.models.catalog import Course
from studybuddy.models.resource import Resource, ResourceLike
from studybuddy.services.db import get_session

router = APIRouter()


class ResourceReq(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    description: Optional[str] = None
    fileUrl: str = Field(..., min_length=1)
    fileType: Optional[str] = Field(None, max_length=64)
    fileSize: Optional[str] = Field(None, max_length=32)
    courseId: uuid.UUID
    resourceType: str = Field("notes", min_length=1, max_length=32)
    uploadedBy: Optional[str] = Field(None, max_length=128)


class LikeReq(BaseModel):
    userId: str = Field(..., min_length=1, max_length=128)


def _row_to_dict(r: Resource, course: Optional[Course] = None) -> Dict[str, Any]:
    return {
        "id": str(r.id),
        "title": r.title,
        "description": r.description,
        "file_url": r.file_url,
        "file_type": r.file_type,
        "file_size": r.file_size,
        "course_id": str(r.course_id),
        "course_name": course.name if course else None,
        "course_code": course.code if course else None,
        "resource_type": r.resource_type,
        "uploaded_by": r.uploaded_by,
        "views": r.views,
        "likes": r.likes,
        "created_at": r.created_at,
    }


@router.get("")
def list_resources(courseId: Optional[uuid.UUID] = None,
                   resourceType: Optional[str] = None,
                   limit: int = Query(50, ge=1, le=200)) -> List[Dict[str, Any]]:
    with get_session() as s:
        stmt = (
            select(Resource, Course)
            .join(Course, Course.id == Resource.course_id)
            .order_by(desc(Resource.created_at))
            .limit(limit)
        )
        if courseId:
            stmt = stmt.filter(Resource.course_id == courseId)
        if resourceType:
            stmt = stmt.filter(Resource.resource_type == resourceType)
        return [_row_to_dict(r, c) for r, c in s.execute(stmt).all()]


@router.post("", status_code=201)
def create_resource(body: ResourceReq) -> Dict[str, Any]:
    with get_session() as s:
        course = s.get(Course, body.courseId)
        if not course:
            raise HTTPException(status_code=404, detail="Course not found")
        r = Resource(
            title=body.title.strip(),
            description=body.description,
            file_url=body.fileUrl,
            file_type=body.fileType,
            file_size=body.fileSize,
            course_id=body.courseId,
            resource_type=body.resourceType,
            uploaded_by=body.uploadedBy,
        )
        s.add(r)
        s.commit()
        s.refresh(r)
        return _row_to_dict(r, course)


@router.get("/{resource_id}")
def get_resource(resource_id: uuid.UUID) -> Dict[str, Any]:
    with get_session() as s:
        r = s.get(Resource, resource_id)
        if not r:
            raise HTTPException(status_code=404, detail="Resource not found")
        return _row_to_dict(r, s.get(Course, r.course_id))


@router.post("/{resource_id}/view")
def increment_views(resource_id: uuid.UUID) -> Dict[str, Any]:
    with get_session() as s:
        r = s.get(Resource, resource_id)
        if not r:
            raise HTTPException(status_code=404, detail="Resource not found")
        r.views = Resource.views + 1
        s.commit()
        s.refresh(r)
        return {"id": str(r.id), "views": r.views}


@router.post("/{resource_id}/like")
def toggle_like(resource_id: uuid.UUID, body: LikeReq) -> Dict[str, Any]:
    """Like the resource, or take the like back if this user already liked it."""
    with get_session() as s:
        r = s.get(Resource, resource_id)
        if not r:
            raise HTTPException(status_code=404, detail="Resource not found")
        existing = s.execute(
            select(ResourceLike)
            .where(ResourceLike.resource_id == resource_id)
            .where(ResourceLike.user_id == body.userId)
        ).scalar_one_or_none()
        if existing:
            s.delete(existing)
            r.likes = Resource.likes - 1
            liked = False
        else:
            s.add(ResourceLike(resource_id=resource_id, user_id=body.userId))
            r.likes = Resource.likes + 1
            liked = True
        s.commit()
        s.refresh(r)
        return {"id": str(r.id), "likes": r.likes, "liked": liked}

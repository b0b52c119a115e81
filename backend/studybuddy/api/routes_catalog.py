# studybuddy/api/routes_catalog.py
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from studybuddy.models.catalog import Course, Department
from studybuddy.services.db import get_session

router = APIRouter()


class DepartmentReq(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    code: Optional[str] = Field(None, max_length=16)
    description: Optional[str] = None


class CourseReq(BaseModel):
    departmentId: uuid.UUID
    name: str = Field(..., min_length=1, max_length=128)
    code: str = Field(..., min_length=1, max_length=32)
    semester: int = Field(..., ge=1, le=8)
    description: Optional[str] = None


def _department_to_dict(d: Department) -> Dict[str, Any]:
    return {
        "id": str(d.id),
        "name": d.name,
        "code": d.code,
        "description": d.description,
    }


def _course_to_dict(c: Course) -> Dict[str, Any]:
    return {
        "id": str(c.id),
        "department_id": str(c.department_id),
        "name": c.name,
        "code": c.code,
        "semester": c.semester,
        "description": c.description,
    }


def _courses_stmt(department_id: uuid.UUID, semester: Optional[int] = None):
    stmt = (
        select(Course)
        .where(Course.department_id == department_id)
        .order_by(Course.semester, Course.name)
    )
    if semester is not None:
        stmt = stmt.filter(Course.semester == semester)
    return stmt


@router.get("/departments")
def list_departments() -> List[Dict[str, Any]]:
    with get_session() as s:
        rows = s.execute(select(Department).order_by(Department.name)).scalars().all()
        return [_department_to_dict(d) for d in rows]


@router.post("/departments", status_code=201)
def create_department(body: DepartmentReq) -> Dict[str, Any]:
    with get_session() as s:
        d = Department(name=body.name.strip(), code=body.code, description=body.description)
        s.add(d)
        try:
            s.commit()
        except IntegrityError:
            s.rollback()
            raise HTTPException(status_code=409, detail="Department already exists")
        s.refresh(d)
        return _department_to_dict(d)


@router.get("/departments/{department_id}")
def get_department(department_id: uuid.UUID) -> Dict[str, Any]:
    with get_session() as s:
        d = s.get(Department, department_id)
        if not d:
            raise HTTPException(status_code=404, detail="Department not found")
        courses = s.execute(_courses_stmt(department_id)).scalars().all()
        out = _department_to_dict(d)
        out["courses"] = [_course_to_dict(c) for c in courses]
        return out


@router.get("/departments/{department_id}/courses")
def department_courses(department_id: uuid.UUID, semester: Optional[int] = None) -> List[Dict[str, Any]]:
    with get_session() as s:
        if not s.get(Department, department_id):
            raise HTTPException(status_code=404, detail="Department not found")
        rows = s.execute(_courses_stmt(department_id, semester)).scalars().all()
        return [_course_to_dict(c) for c in rows]


@router.post("/courses", status_code=201)
def create_course(body: CourseReq) -> Dict[str, Any]:
    with get_session() as s:
        if not s.get(Department, body.departmentId):
            raise HTTPException(status_code=404, detail="Department not found")
        c = Course(
            department_id=body.departmentId,
            name=body.name.strip(),
            code=body.code.strip(),
            semester=body.semester,
            description=body.description,
        )
        s.add(c)
        s.commit()
        s.refresh(c)
        return _course_to_dict(c)


@router.get("/courses/{course_id}")
def get_course(course_id: uuid.UUID) -> Dict[str, Any]:
    with get_session() as s:
        c = s.get(Course, course_id)
        if not c:
            raise HTTPException(status_code=404, detail="Course not found")
        return _course_to_dict(c)

"""
Reference data routes - subjects, classes, academic years, criteria.

POST with an `id` in the body updates that record; without one it
creates a new record.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.services import reference_data

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class SubjectRequest(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    weight: float = Field(..., gt=0)


class ClassRequest(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1)
    academic_year: str = Field(..., min_length=1)


class GenerateClassesRequest(BaseModel):
    academic_year: str = Field(..., min_length=1)
    grade10_letter: str = Field("A", pattern=r"^[A-Z]$")
    grade11_letter: str = Field("B", pattern=r"^[A-Z]$")
    grade12_letter: str = Field("C", pattern=r"^[A-Z]$")
    count: int = Field(10, ge=1, le=20, description="Classes per grade")


class AcademicYearRequest(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    start_date: str
    end_date: str
    is_current: bool = False


class CriterionRequest(BaseModel):
    id: Optional[str] = None
    level: str = Field(..., min_length=1)
    min_gpa: float = Field(..., ge=0, le=10)
    max_gpa: float = Field(..., ge=0, le=10)
    description: Optional[str] = None


# ── Subjects ─────────────────────────────────────────────────

@router.get("/api/subjects")
def list_subjects(db: Session = Depends(get_db)):
    return {"success": True, "data": [s.to_dict() for s in reference_data.list_subjects(db)]}


@router.post("/api/subjects")
def upsert_subject(request: SubjectRequest, db: Session = Depends(get_db)):
    subject = reference_data.upsert_subject(db, request.name, request.weight, request.id)
    return {"success": True, "data": subject.to_dict()}


@router.delete("/api/subjects/{subject_id}")
def delete_subject(subject_id: str, db: Session = Depends(get_db)):
    reference_data.delete_subject(db, subject_id)
    return {"success": True}


# ── Classes ──────────────────────────────────────────────────

@router.get("/api/classes")
def list_classes(db: Session = Depends(get_db)):
    return {"success": True, "data": [c.to_dict() for c in reference_data.list_classes(db)]}


@router.post("/api/classes")
def upsert_class(request: ClassRequest, db: Session = Depends(get_db)):
    school_class = reference_data.upsert_class(
        db, request.name, request.grade, request.academic_year, request.id
    )
    return {"success": True, "data": school_class.to_dict()}


@router.post("/api/classes/generate")
def generate_classes(request: GenerateClassesRequest, db: Session = Depends(get_db)):
    letters = {
        "10": request.grade10_letter,
        "11": request.grade11_letter,
        "12": request.grade12_letter,
    }
    created = reference_data.generate_classes(db, request.academic_year, letters, request.count)
    return {"success": True, "data": [c.to_dict() for c in created]}


# Registered before /{class_id} so "by-year" is not taken as an id
@router.delete("/api/classes/by-year")
def delete_classes_by_year(academic_year: str = Query(...), db: Session = Depends(get_db)):
    deleted = reference_data.delete_classes_by_year(db, academic_year)
    return {"success": True, "deleted": deleted}


@router.delete("/api/classes/{class_id}")
def delete_class(class_id: str, db: Session = Depends(get_db)):
    reference_data.delete_class(db, class_id)
    return {"success": True}


# ── Academic years ───────────────────────────────────────────

@router.get("/api/academic-years")
def list_academic_years(db: Session = Depends(get_db)):
    return {"success": True, "data": [y.to_dict() for y in reference_data.list_academic_years(db)]}


@router.post("/api/academic-years")
def upsert_academic_year(request: AcademicYearRequest, db: Session = Depends(get_db)):
    year = reference_data.upsert_academic_year(
        db, request.name, request.start_date, request.end_date, request.is_current, request.id
    )
    return {"success": True, "data": year.to_dict()}


@router.delete("/api/academic-years/{year_id}")
def delete_academic_year(year_id: str, db: Session = Depends(get_db)):
    reference_data.delete_academic_year(db, year_id)
    return {"success": True}


# ── Academic criteria ────────────────────────────────────────

@router.get("/api/criteria")
def list_criteria(db: Session = Depends(get_db)):
    return {"success": True, "data": [c.to_dict() for c in reference_data.list_criteria(db)]}


@router.post("/api/criteria")
def upsert_criterion(request: CriterionRequest, db: Session = Depends(get_db)):
    criterion = reference_data.upsert_criterion(
        db, request.level, request.min_gpa, request.max_gpa, request.description, request.id
    )
    return {"success": True, "data": criterion.to_dict()}


@router.delete("/api/criteria/{criterion_id}")
def delete_criterion(criterion_id: str, db: Session = Depends(get_db)):
    reference_data.delete_criterion(db, criterion_id)
    return {"success": True}

"""
Score routes - entry and retrieval of component scores.

Component scores outside [0, 10] and semesters other than 1 and 2 are
rejected here, before reaching the scoring service.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.services import scoring

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class ScoreUpsertRequest(BaseModel):
    """One student's scores for one subject and term."""
    student_id: str
    subject_name: str = Field(..., min_length=1)
    subject_weight: float = Field(1.0, gt=0)
    quiz_score: Optional[float] = Field(None, ge=0, le=10)
    periodic_score: Optional[float] = Field(None, ge=0, le=10)
    final_score: Optional[float] = Field(None, ge=0, le=10)
    semester: int = Field(..., ge=1, le=2)
    academic_year: str = Field(..., min_length=1)
    entered_by: str


class ScoreRow(BaseModel):
    student_id: str
    quiz_score: Optional[float] = Field(None, ge=0, le=10)
    periodic_score: Optional[float] = Field(None, ge=0, le=10)
    final_score: Optional[float] = Field(None, ge=0, le=10)


class ScoreBatchRequest(BaseModel):
    """Several students' scores for one subject and term, saved together."""
    subject_name: str = Field(..., min_length=1)
    subject_weight: float = Field(1.0, gt=0)
    semester: int = Field(..., ge=1, le=2)
    academic_year: str = Field(..., min_length=1)
    entered_by: str
    rows: List[ScoreRow]


@router.post("/api/scores")
def upsert_score(request: ScoreUpsertRequest, db: Session = Depends(get_db)):
    entry = scoring.upsert_score(
        db, request.student_id, request.subject_name, request.subject_weight,
        request.quiz_score, request.periodic_score, request.final_score,
        request.semester, request.academic_year, request.entered_by,
    )
    return {"success": True, "data": entry.to_dict()}


@router.post("/api/scores/batch")
def upsert_score_batch(request: ScoreBatchRequest, db: Session = Depends(get_db)):
    entries = scoring.upsert_score_batch(
        db, [row.model_dump() for row in request.rows], request.subject_name,
        request.subject_weight, request.semester, request.academic_year, request.entered_by,
    )
    return {"success": True, "saved": len(entries)}


@router.get("/api/scores/by-class")
def get_scores_by_class(
    subject_name: str = Query(..., description="Subject name"),
    semester: int = Query(..., ge=1, le=2),
    academic_year: str = Query(..., description="Academic year name, e.g. 2024-2025"),
    class_name: Optional[str] = Query(None, description="Restrict to one class"),
    db: Session = Depends(get_db)
):
    rows = scoring.get_scores_by_class(db, subject_name, semester, academic_year, class_name)
    return {"success": True, "rows": rows}


@router.get("/api/scores/student/{student_id}")
def get_student_scores(
    student_id: str,
    semester: Optional[int] = Query(None, ge=1, le=2),
    academic_year: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    entries = scoring.get_student_scores(db, student_id, semester, academic_year)
    return {
        "success": True,
        "rows": [e.to_dict() for e in entries],
        "gpa": scoring.compute_gpa(entries),
    }

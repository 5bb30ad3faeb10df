"""
Ranking API routes - ranked GPA listings for a class or the whole school.

Entries are ordered by GPA (highest first) and numbered by position.
Students with no scores in the term are not listed.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.services import ranking

router = APIRouter()


@router.get("/api/ranking/class")
def get_class_ranking(
    class_name: str = Query(..., description="Class to rank, e.g. 10A1"),
    semester: int = Query(..., ge=1, le=2),
    academic_year: str = Query(..., description="Academic year name"),
    db: Session = Depends(get_db)
):
    entries = ranking.rank_class(db, class_name, semester, academic_year)
    return {"success": True, "entries": entries}


@router.get("/api/ranking/school")
def get_school_ranking(
    semester: int = Query(..., ge=1, le=2),
    academic_year: str = Query(..., description="Academic year name"),
    db: Session = Depends(get_db)
):
    entries = ranking.rank_school(db, semester, academic_year)
    return {"success": True, "entries": entries}

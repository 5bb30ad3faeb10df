"""
Ranking Service - class and school rank listings for a term.

For each student in scope:
1. Load their score entries for the semester and academic year
2. Compute the GPA (students without one are left out)
3. Classify the GPA into an academic level
Then sort by GPA descending and number the rows 1..N by position;
equal GPAs keep their enumeration order and get consecutive ranks.
"""

import time
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from gradebook.models.profiles import StudentProfile
from gradebook.models.score_entry import ScoreEntry
from gradebook.services.scoring import compute_gpa
from gradebook.logging_config import get_logger, log_with_context

logger = get_logger("ranking")

# (lower bound inclusive, label), highest first
LEVEL_THRESHOLDS = [
    (9.0, "Excellent"),
    (8.0, "Good"),
    (6.5, "Fair"),
    (5.0, "Average"),
]
LOWEST_LEVEL = "Weak"


def academic_level(gpa: float) -> str:
    """Label for a GPA using the fixed thresholds."""
    for lower_bound, label in LEVEL_THRESHOLDS:
        if gpa >= lower_bound:
            return label
    return LOWEST_LEVEL


def _build_ranking(db: Session, students: List[StudentProfile], semester: int,
                   academic_year: str) -> List[dict]:
    student_ids = [s.id for s in students]
    scores_by_student = {}
    if student_ids:
        term_scores = db.query(ScoreEntry).filter(
            ScoreEntry.student_id.in_(student_ids),
            ScoreEntry.semester == semester,
            ScoreEntry.academic_year == academic_year,
        ).all()
        for entry in term_scores:
            scores_by_student.setdefault(entry.student_id, []).append(entry)

    entries = []
    for student in students:
        # Profiles whose account was deleted are not ranked
        if student.account is None:
            continue

        gpa = compute_gpa(scores_by_student.get(student.id, []))
        if gpa is None:
            continue

        entries.append({
            "student_id": student.id,
            "student_name": student.account.full_name,
            "class_name": student.class_name,
            "gpa": gpa,
            "academic_level": academic_level(gpa),
        })

    # sorted() is stable, so ties keep enumeration order
    ranked = sorted(entries, key=lambda e: e["gpa"], reverse=True)
    for rank, entry in enumerate(ranked, 1):
        entry["rank"] = rank
    return ranked


def rank_class(db: Session, class_name: str, semester: int, academic_year: str) -> List[dict]:
    """Rank the students of one class for a term."""
    start_time = time.time()
    students = db.query(StudentProfile).options(
        joinedload(StudentProfile.account)
    ).filter(
        StudentProfile.class_name == class_name
    ).order_by(StudentProfile.student_code).all()

    ranking = _build_ranking(db, students, semester, academic_year)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Class ranking computed: {} of {} students ranked".format(len(ranking), len(students)),
        context={"class_name": class_name, "semester": semester, "academic_year": academic_year},
        extra_data={"duration_ms": round(duration_ms, 2), "entries": len(ranking)})
    return ranking


def rank_school(db: Session, semester: int, academic_year: str,
                limit: Optional[int] = None) -> List[dict]:
    """Rank every student in the school for a term; `limit` trims the listing."""
    start_time = time.time()
    students = db.query(StudentProfile).options(
        joinedload(StudentProfile.account)
    ).order_by(StudentProfile.student_code).all()

    ranking = _build_ranking(db, students, semester, academic_year)
    if limit is not None:
        ranking = ranking[:limit]

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "School ranking computed: {} of {} students ranked".format(len(ranking), len(students)),
        context={"semester": semester, "academic_year": academic_year},
        extra_data={"duration_ms": round(duration_ms, 2), "entries": len(ranking)})
    return ranking

"""
Scoring Service - per-subject weighted averages and student GPA.

Formulas:
1. weighted average = Σ(component × weight) / Σ(weight) over the components
   that are present, with weights quiz=1, periodic=2, final=3
2. GPA = Σ(weighted average × subject weight) / Σ(subject weight) over the
   subjects that have a weighted average
Both are rounded half-up to 2 decimals. A missing component or subject is
left out of the sums, never counted as zero.
"""

import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.database import utc_now_iso
from gradebook.errors import NotFoundError, ValidationError
from gradebook.models.profiles import StudentProfile
from gradebook.models.score_entry import ScoreEntry
from gradebook.logging_config import get_logger, log_with_context

logger = get_logger("scoring")

QUIZ_WEIGHT = 1
PERIODIC_WEIGHT = 2
FINAL_WEIGHT = 3


def round2(value: float) -> float:
    """Round half-up to 2 decimal places."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_weighted_average(quiz: Optional[float], periodic: Optional[float],
                             final: Optional[float]) -> Optional[float]:
    """
    Weighted average of whichever components are present.

    Returns None only when all three are None.
    """
    components = [
        (quiz, QUIZ_WEIGHT),
        (periodic, PERIODIC_WEIGHT),
        (final, FINAL_WEIGHT),
    ]
    present = [(score, weight) for score, weight in components if score is not None]
    if not present:
        return None

    total = sum(score * weight for score, weight in present)
    total_weight = sum(weight for _, weight in present)
    return round2(total / total_weight)


def compute_gpa(entries: Iterable) -> Optional[float]:
    """
    GPA over score entries weighted by subject weight.

    `entries` may hold ScoreEntry rows or dicts with `weighted_avg` and
    `subject_weight`. Entries without a weighted average are skipped;
    returns None if nothing remains.
    """
    valid = []
    for entry in entries:
        if isinstance(entry, dict):
            avg, weight = entry.get("weighted_avg"), entry.get("subject_weight")
        else:
            avg, weight = entry.weighted_avg, entry.subject_weight
        if avg is not None:
            valid.append((avg, weight))

    if not valid:
        return None

    numerator = sum(avg * weight for avg, weight in valid)
    denominator = sum(weight for _, weight in valid)
    if denominator == 0:
        return None
    return round2(numerator / denominator)


def _apply_score(db: Session, student_id: str, subject_name: str, subject_weight: float,
                 quiz: Optional[float], periodic: Optional[float], final: Optional[float],
                 semester: int, academic_year: str, entered_by: str) -> ScoreEntry:
    """Insert or update one entry in the current transaction without committing."""
    student = db.query(StudentProfile).filter(StudentProfile.id == student_id).first()
    if not student:
        raise NotFoundError("Student not found: {}".format(student_id))

    weighted_avg = compute_weighted_average(quiz, periodic, final)
    now = utc_now_iso()

    existing = db.query(ScoreEntry).filter(
        ScoreEntry.student_id == student_id,
        ScoreEntry.subject_name == subject_name,
        ScoreEntry.semester == semester,
        ScoreEntry.academic_year == academic_year,
    ).first()

    if existing:
        # The subject weight snapshot is kept from the first write
        existing.quiz_score = quiz
        existing.periodic_score = periodic
        existing.final_score = final
        existing.weighted_avg = weighted_avg
        existing.updated_by = entered_by
        existing.updated_at = now
        return existing

    entry = ScoreEntry(
        student_id=student_id,
        subject_name=subject_name,
        subject_weight=subject_weight,
        quiz_score=quiz,
        periodic_score=periodic,
        final_score=final,
        weighted_avg=weighted_avg,
        semester=semester,
        academic_year=academic_year,
        entered_by=entered_by,
        entered_at=now,
    )
    db.add(entry)
    db.flush()
    return entry


def _duplicate_entry(db: Session, e: IntegrityError, context: dict) -> ValidationError:
    """Roll back a store unique violation and describe it as a duplicate."""
    db.rollback()
    log_with_context(logger, "WARNING", "Score write rejected by store: {}".format(e.orig),
                    context=context)
    return ValidationError("A score entry for this student, subject and term was saved concurrently",
                           code="DUPLICATE_NAME")


def upsert_score(db: Session, student_id: str, subject_name: str, subject_weight: float,
                 quiz: Optional[float], periodic: Optional[float], final: Optional[float],
                 semester: int, academic_year: str, entered_by: str) -> ScoreEntry:
    """
    Create or update the score entry for (student, subject, semester, year).

    Recomputes the weighted average on every call. New entries are stamped
    with entered_by/entered_at, existing ones with updated_by/updated_at.
    """
    start_time = time.time()
    try:
        entry = _apply_score(db, student_id, subject_name, subject_weight,
                             quiz, periodic, final, semester, academic_year, entered_by)
        db.commit()
    except IntegrityError as e:
        raise _duplicate_entry(db, e, {"student_id": student_id, "entered_by": entered_by})
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Score saved: {} semester {} {} (avg={})".format(
            subject_name, semester, academic_year, entry.weighted_avg),
        context={
            "student_id": student_id,
            "score_entry_id": entry.id,
            "entered_by": entered_by
        },
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "weighted_avg": entry.weighted_avg,
            "updated": entry.updated_at is not None
        })
    return entry


def upsert_score_batch(db: Session, rows: List[dict], subject_name: str, subject_weight: float,
                       semester: int, academic_year: str, entered_by: str) -> List[ScoreEntry]:
    """
    Save many students' scores for one subject and term as a unit.

    Each row holds student_id, quiz_score, periodic_score and final_score.
    Either every row is committed or, on the first failure, none is.
    """
    start_time = time.time()
    entries = []
    try:
        for row in rows:
            entries.append(_apply_score(
                db, row["student_id"], subject_name, subject_weight,
                row.get("quiz_score"), row.get("periodic_score"), row.get("final_score"),
                semester, academic_year, entered_by,
            ))
        db.commit()
    except IntegrityError as e:
        raise _duplicate_entry(db, e, {"entered_by": entered_by})
    except Exception as e:
        db.rollback()
        log_with_context(logger, "WARNING",
            "Score batch rolled back after {} of {} rows: {}".format(len(entries), len(rows), e),
            context={"entered_by": entered_by},
            extra_data={"subject_name": subject_name, "semester": semester})
        raise

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Score batch saved: {} rows for {} semester {} {}".format(
            len(entries), subject_name, semester, academic_year),
        context={"entered_by": entered_by},
        extra_data={"duration_ms": round(duration_ms, 2), "rows": len(entries)})
    return entries


def get_scores_by_class(db: Session, subject_name: str, semester: int, academic_year: str,
                        class_name: Optional[str] = None) -> List[dict]:
    """
    Component scores for one subject and term.

    Without class_name every student's entry is returned.
    """
    query = db.query(ScoreEntry).filter(
        ScoreEntry.subject_name == subject_name,
        ScoreEntry.semester == semester,
        ScoreEntry.academic_year == academic_year,
    )
    if class_name:
        query = query.join(StudentProfile).filter(StudentProfile.class_name == class_name)

    return [
        {
            "student_id": entry.student_id,
            "quiz_score": entry.quiz_score,
            "periodic_score": entry.periodic_score,
            "final_score": entry.final_score,
            "weighted_avg": entry.weighted_avg,
        }
        for entry in query.all()
    ]


def get_student_scores(db: Session, student_id: str, semester: Optional[int] = None,
                       academic_year: Optional[str] = None) -> List[ScoreEntry]:
    """All entries of one student, optionally narrowed to a semester and/or year."""
    query = db.query(ScoreEntry).filter(ScoreEntry.student_id == student_id)
    if semester is not None:
        query = query.filter(ScoreEntry.semester == semester)
    if academic_year:
        query = query.filter(ScoreEntry.academic_year == academic_year)
    return query.order_by(ScoreEntry.academic_year, ScoreEntry.semester, ScoreEntry.subject_name).all()

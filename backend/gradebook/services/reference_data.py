"""
Reference Data Service - subjects, classes, academic years and GPA criteria.

All four follow the same upsert rule: a given id updates that row, no id
inserts a new one. Multi-row changes (switching the current academic
year, regenerating a year's classes) run in a single transaction.
"""

import os
import re
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.database import utc_now_iso
from gradebook.errors import NotFoundError, ValidationError
from gradebook.models.reference import Subject, SchoolClass, AcademicYear, AcademicCriterion
from gradebook.logging_config import get_logger, log_with_context

logger = get_logger("reference")

CLASS_NAME_PATTERN = re.compile(r"^(\d+)([A-Z]+)(\d+)$")
GENERATED_GRADES = ["10", "11", "12"]
DEFAULT_ACADEMIC_YEAR = os.getenv("DEFAULT_ACADEMIC_YEAR", "2024-2025")


def _get_or_404(db: Session, model, record_id: str, label: str):
    record = db.query(model).filter(model.id == record_id).first()
    if not record:
        raise NotFoundError("{} not found".format(label))
    return record


def _commit(db: Session, label: str):
    """Commit, turning unique-constraint violations into validation errors."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        log_with_context(logger, "WARNING", "{} rejected by store: {}".format(label, e.orig))
        raise ValidationError("{} with this name already exists".format(label), code="DUPLICATE_NAME")


def _delete(db: Session, model, record_id: str, label: str):
    record = _get_or_404(db, model, record_id, label)
    db.delete(record)
    db.commit()
    log_with_context(logger, "INFO", "{} deleted".format(label), context={"id": record_id})


# ── Subjects ─────────────────────────────────────────────────

def list_subjects(db: Session) -> List[Subject]:
    return db.query(Subject).order_by(Subject.created_at, Subject.name).all()


def upsert_subject(db: Session, name: str, weight: float, subject_id: Optional[str] = None) -> Subject:
    if subject_id:
        subject = _get_or_404(db, Subject, subject_id, "Subject")
        subject.name = name
        subject.weight = weight
    else:
        subject = Subject(name=name, weight=weight, is_active=True, created_at=utc_now_iso())
        db.add(subject)
    _commit(db, "Subject")
    log_with_context(logger, "INFO", "Subject saved: {} (weight {})".format(name, weight),
                    context={"id": subject.id})
    return subject


def delete_subject(db: Session, subject_id: str):
    _delete(db, Subject, subject_id, "Subject")


# ── Classes ──────────────────────────────────────────────────

def class_sort_key(name: str) -> Tuple[int, str, int]:
    """(grade, letters, number) for names like 10A1; (0, '', 0) otherwise."""
    match = CLASS_NAME_PATTERN.match(name)
    if not match:
        return (0, "", 0)
    return (int(match.group(1)), match.group(2), int(match.group(3)))


def list_classes(db: Session) -> List[SchoolClass]:
    """Classes in display order: 10A1, 10A2, ..., 10A10, 11A1, ..."""
    return sorted(db.query(SchoolClass).all(), key=lambda c: class_sort_key(c.name))


def upsert_class(db: Session, name: str, grade: str, academic_year: str,
                 class_id: Optional[str] = None) -> SchoolClass:
    if class_id:
        school_class = _get_or_404(db, SchoolClass, class_id, "Class")
        school_class.name = name
        school_class.grade = grade
        school_class.academic_year = academic_year
    else:
        school_class = SchoolClass(name=name, grade=grade, academic_year=academic_year,
                                   is_active=True, created_at=utc_now_iso())
        db.add(school_class)
    _commit(db, "Class")
    log_with_context(logger, "INFO", "Class saved: {}".format(name),
                    context={"id": school_class.id, "academic_year": academic_year})
    return school_class


def delete_class(db: Session, class_id: str):
    _delete(db, SchoolClass, class_id, "Class")


def delete_classes_by_year(db: Session, academic_year: str) -> int:
    deleted = db.query(SchoolClass).filter(SchoolClass.academic_year == academic_year).delete()
    db.commit()
    log_with_context(logger, "INFO", "Deleted {} classes".format(deleted),
                    context={"academic_year": academic_year})
    return deleted


def generate_classes(db: Session, academic_year: str, letters: Dict[str, str], count: int) -> List[SchoolClass]:
    """
    Replace a year's classes with `count` classes per grade.

    `letters` maps each grade ('10', '11', '12') to its letter; grade 10
    with letter A and count 3 gives 10A1, 10A2, 10A3. Two grades may not
    share a letter. The delete and all inserts commit together.
    """
    chosen = [letters[grade] for grade in GENERATED_GRADES]
    if len(set(chosen)) != len(chosen):
        raise ValidationError("Grades cannot share the same class letter", code="DUPLICATE_LETTER")

    now = utc_now_iso()
    created = []
    try:
        db.query(SchoolClass).filter(SchoolClass.academic_year == academic_year).delete()
        for grade in GENERATED_GRADES:
            for i in range(1, count + 1):
                school_class = SchoolClass(
                    name="{}{}{}".format(grade, letters[grade], i),
                    grade=grade,
                    academic_year=academic_year,
                    is_active=True,
                    created_at=now,
                )
                db.add(school_class)
                created.append(school_class)
        db.commit()
    except IntegrityError as e:
        # a generated name is taken by another year's class
        db.rollback()
        log_with_context(logger, "WARNING", "Class generation rolled back: {}".format(e.orig),
                        context={"academic_year": academic_year})
        raise ValidationError("A generated class name already exists in another academic year",
                              code="DUPLICATE_NAME")

    log_with_context(logger, "INFO", "Generated {} classes".format(len(created)),
                    context={"academic_year": academic_year},
                    extra_data={"letters": letters, "per_grade": count})
    return sorted(created, key=lambda c: class_sort_key(c.name))


# ── Academic years ───────────────────────────────────────────

def list_academic_years(db: Session) -> List[AcademicYear]:
    return db.query(AcademicYear).order_by(AcademicYear.start_date).all()


def get_current_academic_year(db: Session) -> Optional[AcademicYear]:
    return db.query(AcademicYear).filter(AcademicYear.is_current.is_(True)).first()


def current_academic_year_name(db: Session) -> str:
    """Name of the current year, or DEFAULT_ACADEMIC_YEAR when none is flagged."""
    current = get_current_academic_year(db)
    return current.name if current else DEFAULT_ACADEMIC_YEAR


def upsert_academic_year(db: Session, name: str, start_date: str, end_date: str, is_current: bool,
                         year_id: Optional[str] = None) -> AcademicYear:
    """
    Create or update an academic year.

    With is_current set, every other year is cleared in the same
    transaction, so exactly one year is current afterwards.
    """
    if year_id:
        year = _get_or_404(db, AcademicYear, year_id, "Academic year")
    else:
        year = AcademicYear(created_at=utc_now_iso())
        db.add(year)

    if is_current:
        query = db.query(AcademicYear)
        if year_id:
            query = query.filter(AcademicYear.id != year_id)
        query.update({AcademicYear.is_current: False}, synchronize_session="fetch")

    year.name = name
    year.start_date = start_date
    year.end_date = end_date
    year.is_current = is_current
    _commit(db, "Academic year")

    log_with_context(logger, "INFO", "Academic year saved: {}{}".format(name, " (current)" if is_current else ""),
                    context={"id": year.id})
    return year


def delete_academic_year(db: Session, year_id: str):
    _delete(db, AcademicYear, year_id, "Academic year")


# ── Academic criteria ────────────────────────────────────────

def list_criteria(db: Session) -> List[AcademicCriterion]:
    return db.query(AcademicCriterion).order_by(AcademicCriterion.min_gpa.desc()).all()


def upsert_criterion(db: Session, level: str, min_gpa: float, max_gpa: float,
                     description: Optional[str] = None, criterion_id: Optional[str] = None) -> AcademicCriterion:
    if min_gpa > max_gpa:
        raise ValidationError("min_gpa must not exceed max_gpa")

    now = utc_now_iso()
    if criterion_id:
        criterion = _get_or_404(db, AcademicCriterion, criterion_id, "Criterion")
    else:
        criterion = AcademicCriterion(created_at=now)
        db.add(criterion)

    criterion.level = level
    criterion.min_gpa = min_gpa
    criterion.max_gpa = max_gpa
    criterion.description = description
    criterion.updated_at = now
    _commit(db, "Criterion")

    log_with_context(logger, "INFO", "Criterion saved: {} [{}, {}]".format(level, min_gpa, max_gpa),
                    context={"id": criterion.id})
    return criterion


def delete_criterion(db: Session, criterion_id: str):
    _delete(db, AcademicCriterion, criterion_id, "Criterion")

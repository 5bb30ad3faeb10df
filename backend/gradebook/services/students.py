"""Student listings for score entry and administration screens."""

from typing import List

from sqlalchemy.orm import Session, joinedload

from gradebook.models.profiles import StudentProfile


def list_students_by_class(db: Session, class_name: str) -> List[dict]:
    students = db.query(StudentProfile).options(
        joinedload(StudentProfile.account)
    ).filter(
        StudentProfile.class_name == class_name
    ).order_by(StudentProfile.student_code).all()

    return [
        {
            "student_id": s.id,
            "student_name": s.account.full_name if s.account else "Unknown",
            "student_code": s.student_code,
            "class_name": s.class_name,
        }
        for s in students
    ]


def list_students(db: Session) -> List[dict]:
    return [
        {
            "id": s.id,
            "account_id": s.account_id,
            "student_code": s.student_code,
            "class_name": s.class_name,
            "grade": s.grade,
            "date_of_birth": s.date_of_birth,
            "academic_year": s.academic_year,
        }
        for s in db.query(StudentProfile).order_by(StudentProfile.student_code).all()
    ]

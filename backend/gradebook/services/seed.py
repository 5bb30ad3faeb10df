"""
Default data for a fresh database.

Runs only when the accounts table is empty. Creates the super-admin,
one admin, one teacher, three students in 10A1, the standard subjects,
classes 10A1-12A10, three academic years and the GPA criteria bands.
"""

from sqlalchemy.orm import Session

from gradebook.database import utc_now_iso
from gradebook.models.account import Account, Role
from gradebook.models.profiles import StudentProfile, TeacherProfile
from gradebook.models.reference import Subject, SchoolClass, AcademicYear, AcademicCriterion
from gradebook.security import get_password_hash
from gradebook.logging_config import get_logger, log_with_context

logger = get_logger("db")

SEED_YEAR = "2024-2025"

SEED_ACCOUNTS = [
    # username, password, full name, role, super-admin
    ("superadmin", "admin123", "Super Admin", Role.ADMIN, True),
    ("admin01", "admin456", "Tran Thi Admin", Role.ADMIN, False),
    ("teacher01", "teacher123", "Nguyen Thi B", Role.TEACHER, False),
    ("student01", "student123", "Tran Van C", Role.STUDENT, False),
    ("student02", "student123", "Nguyen Van A", Role.STUDENT, False),
    ("student03", "student123", "Le Thi D", Role.STUDENT, False),
]

SEED_STUDENTS = {
    "student01": ("HS000001", "2008-01-01"),
    "student02": ("HS000002", "2008-03-15"),
    "student03": ("HS000003", "2008-05-20"),
}

SEED_SUBJECTS = [
    ("Mathematics", 2), ("Literature", 2), ("English", 2),
    ("Physics", 1), ("Chemistry", 1), ("Biology", 1),
    ("History", 1), ("Geography", 1), ("Civic Education", 1),
    ("Informatics", 1), ("Physical Education", 1),
]

SEED_YEARS = [
    ("2023-2024", "2023-09-05", "2024-05-31", False),
    ("2024-2025", "2024-09-05", "2025-05-31", True),
    ("2025-2026", "2025-09-05", "2026-05-31", False),
]

SEED_CRITERIA = [
    ("Excellent", 9.0, 10.0, "GPA from 9.0"),
    ("Good", 8.0, 8.99, "GPA from 8.0 to below 9.0"),
    ("Fair", 6.5, 7.99, "GPA from 6.5 to below 8.0"),
    ("Average", 5.0, 6.49, "GPA from 5.0 to below 6.5"),
    ("Weak", 0.0, 4.99, "GPA below 5.0"),
]

SEED_CLASSES_PER_GRADE = 10


def seed_defaults(db: Session) -> bool:
    """Populate an empty database. Returns False if accounts already exist."""
    if db.query(Account).first() is not None:
        log_with_context(logger, "INFO", "Database already seeded, skipping")
        return False

    now = utc_now_iso()
    for username, password, full_name, role, is_super_admin in SEED_ACCOUNTS:
        account = Account(
            username=username,
            password_hash=get_password_hash(password),
            full_name=full_name,
            role=role.value,
            is_super_admin=is_super_admin,
            is_verified=True,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        db.add(account)
        db.flush()

        if username in SEED_STUDENTS:
            code, date_of_birth = SEED_STUDENTS[username]
            db.add(StudentProfile(account_id=account.id, student_code=code, class_name="10A1",
                                  grade="10", date_of_birth=date_of_birth, academic_year=SEED_YEAR))
        elif role == Role.TEACHER:
            db.add(TeacherProfile(account_id=account.id, teacher_code="GV000001"))

    for name, weight in SEED_SUBJECTS:
        db.add(Subject(name=name, weight=weight, is_active=True, created_at=now))

    for grade in ("10", "11", "12"):
        for i in range(1, SEED_CLASSES_PER_GRADE + 1):
            db.add(SchoolClass(name="{}A{}".format(grade, i), grade=grade,
                               academic_year=SEED_YEAR, is_active=True, created_at=now))

    for name, start_date, end_date, is_current in SEED_YEARS:
        db.add(AcademicYear(name=name, start_date=start_date, end_date=end_date,
                            is_current=is_current, created_at=now))

    for level, min_gpa, max_gpa, description in SEED_CRITERIA:
        db.add(AcademicCriterion(level=level, min_gpa=min_gpa, max_gpa=max_gpa,
                                 description=description, created_at=now, updated_at=now))

    db.commit()
    log_with_context(logger, "INFO", "Seeded default data",
                    extra_data={
                        "accounts": [a[0] for a in SEED_ACCOUNTS],
                        "subjects": len(SEED_SUBJECTS),
                        "classes": 3 * SEED_CLASSES_PER_GRADE,
                    })
    return True

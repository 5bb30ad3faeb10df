"""
Dashboard Service - the landing summary for each role.

The account's role selects one builder from DASHBOARDS:
- admin: account counts and admins waiting for verification
- teacher: student count and the school's top ranking for the current year
- student: own scores for the current year and school rank per semester
"""

from sqlalchemy.orm import Session

from gradebook.errors import NotFoundError
from gradebook.models.account import Account, Role
from gradebook.models.profiles import StudentProfile
from gradebook.services.ranking import rank_school
from gradebook.services.reference_data import current_academic_year_name
from gradebook.services.scoring import get_student_scores, compute_gpa

TEACHER_TOP_N = 10
SEMESTERS = (1, 2)


def admin_dashboard(db: Session, account: Account) -> dict:
    accounts = db.query(Account).all()
    counts = {role.value: 0 for role in Role}
    for a in accounts:
        counts[a.role] = counts.get(a.role, 0) + 1
    return {
        "total_accounts": len(accounts),
        "accounts_by_role": counts,
        "locked_accounts": sum(1 for a in accounts if not a.is_active),
        "pending_admin_verifications": sum(
            1 for a in accounts if a.role == Role.ADMIN.value and not a.is_verified
        ),
    }


def teacher_dashboard(db: Session, account: Account) -> dict:
    academic_year = current_academic_year_name(db)
    return {
        "academic_year": academic_year,
        "student_count": db.query(StudentProfile).count(),
        "top_students": rank_school(db, 1, academic_year, limit=TEACHER_TOP_N),
    }


def student_dashboard(db: Session, account: Account) -> dict:
    academic_year = current_academic_year_name(db)
    profile = db.query(StudentProfile).filter(StudentProfile.account_id == account.id).first()
    if not profile:
        return {"academic_year": academic_year, "profile": None, "semesters": []}

    semesters = []
    for semester in SEMESTERS:
        entries = get_student_scores(db, profile.id, semester, academic_year)
        ranking = rank_school(db, semester, academic_year)
        own = next((e for e in ranking if e["student_id"] == profile.id), None)
        semesters.append({
            "semester": semester,
            "scores": [e.to_dict() for e in entries],
            "gpa": compute_gpa(entries),
            "school_rank": own["rank"] if own else None,
            "academic_level": own["academic_level"] if own else None,
            "ranked_students": len(ranking),
        })

    return {
        "academic_year": academic_year,
        "profile": {
            "student_id": profile.id,
            "student_code": profile.student_code,
            "class_name": profile.class_name,
        },
        "semesters": semesters,
    }


DASHBOARDS = {
    Role.ADMIN: admin_dashboard,
    Role.TEACHER: teacher_dashboard,
    Role.STUDENT: student_dashboard,
}


def build_dashboard(db: Session, account_id: str) -> dict:
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise NotFoundError("Account not found")

    role = Role(account.role)
    return {
        "role": role.value,
        "full_name": account.full_name,
        **DASHBOARDS[role](db, account),
    }

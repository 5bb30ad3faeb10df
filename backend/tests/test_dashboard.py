from gradebook.services.dashboard import build_dashboard

from conftest import make_account, make_student, add_score


def test_admin_dashboard_counts(db):
    root = make_account(db, "root", role="admin", is_super_admin=True)
    make_account(db, "pending", role="admin", is_verified=False)
    make_account(db, "teacher01", role="teacher", is_active=False)
    make_student(db, "student01")

    data = build_dashboard(db, root.id)

    assert data["role"] == "admin"
    assert data["total_accounts"] == 4
    assert data["accounts_by_role"] == {"student": 1, "teacher": 1, "admin": 2}
    assert data["locked_accounts"] == 1
    assert data["pending_admin_verifications"] == 1


def test_student_dashboard_with_rank(db):
    top = make_student(db, "top", code="HS01")
    own = make_student(db, "own", code="HS02", full_name="Own Student")
    add_score(db, top, "Mathematics", 9.5)
    add_score(db, own, "Mathematics", 7.0, subject_weight=2)
    add_score(db, own, "History", 8.0)
    add_score(db, own, "History", 4.0, academic_year="2023-2024")

    data = build_dashboard(db, own.account_id)

    assert data["full_name"] == "Own Student"
    assert data["academic_year"] == "2024-2025"
    assert data["profile"] == {"student_id": own.id, "student_code": "HS02", "class_name": "10A1"}

    first, second = data["semesters"]
    assert first["gpa"] == 7.33
    assert first["school_rank"] == 2
    assert first["academic_level"] == "Fair"
    assert first["ranked_students"] == 2
    assert len(first["scores"]) == 2

    assert second == {
        "semester": 2,
        "scores": [],
        "gpa": None,
        "school_rank": None,
        "academic_level": None,
        "ranked_students": 0,
    }


def test_student_dashboard_without_profile(db):
    account = make_account(db, "noclass")
    data = build_dashboard(db, account.id)
    assert data["profile"] is None
    assert data["semesters"] == []


def test_teacher_dashboard_top_students(db):
    teacher = make_account(db, "teacher01", role="teacher")
    student = make_student(db, "an")
    add_score(db, student, "Mathematics", 8.5)

    data = build_dashboard(db, teacher.id)

    assert data["student_count"] == 1
    assert [(e["student_id"], e["rank"], e["academic_level"]) for e in data["top_students"]] == [
        (student.id, 1, "Good"),
    ]

import pytest

from gradebook.models import Account
from gradebook.services.ranking import academic_level, rank_class, rank_school

from conftest import make_student, add_score


@pytest.mark.parametrize("gpa, level", [
    (10.0, "Excellent"),
    (9.0, "Excellent"),
    (8.99, "Good"),
    (8.0, "Good"),
    (6.5, "Fair"),
    (6.49, "Average"),
    (5.0, "Average"),
    (4.99, "Weak"),
    (0.0, "Weak"),
])
def test_academic_level_thresholds(gpa, level):
    assert academic_level(gpa) == level


def test_class_ranking_orders_by_gpa(db):
    low = make_student(db, "low", code="HS01", full_name="Low Student")
    high = make_student(db, "high", code="HS02", full_name="High Student")
    mid = make_student(db, "mid", code="HS03")
    add_score(db, low, "Mathematics", 4.0)
    add_score(db, high, "Mathematics", 9.5, subject_weight=2)
    add_score(db, high, "History", 8.0)
    add_score(db, mid, "Mathematics", 7.0)

    entries = rank_class(db, "10A1", 1, "2024-2025")

    assert [e["student_id"] for e in entries] == [high.id, mid.id, low.id]
    assert [e["rank"] for e in entries] == [1, 2, 3]
    assert entries[0] == {
        "student_id": high.id,
        "student_name": "High Student",
        "class_name": "10A1",
        "gpa": 9.0,
        "academic_level": "Excellent",
        "rank": 1,
    }
    assert entries[2]["academic_level"] == "Weak"


def test_ties_get_consecutive_ranks_in_enumeration_order(db):
    first = make_student(db, "first", code="HS01")
    second = make_student(db, "second", code="HS02")
    third = make_student(db, "third", code="HS03")
    add_score(db, first, "Mathematics", 7.5)
    add_score(db, second, "Mathematics", 7.5)
    add_score(db, third, "Mathematics", 8.0)

    entries = rank_class(db, "10A1", 1, "2024-2025")

    assert [e["student_id"] for e in entries] == [third.id, first.id, second.id]
    assert [e["rank"] for e in entries] == [1, 2, 3]


def test_students_without_scores_are_excluded(db):
    scored = make_student(db, "scored", code="HS01")
    make_student(db, "unscored", code="HS02")
    null_only = make_student(db, "nullonly", code="HS03")
    add_score(db, scored, "Mathematics", 6.0)
    add_score(db, null_only, "Mathematics", None)

    entries = rank_class(db, "10A1", 1, "2024-2025")

    assert [e["student_id"] for e in entries] == [scored.id]
    assert entries[0]["rank"] == 1


def test_ranking_only_uses_the_requested_term(db):
    student = make_student(db, "term", code="HS01")
    add_score(db, student, "Mathematics", 9.0, semester=2)
    add_score(db, student, "Mathematics", 3.0, academic_year="2023-2024")

    assert rank_class(db, "10A1", 1, "2024-2025") == []
    assert rank_class(db, "10A1", 2, "2024-2025")[0]["gpa"] == 9.0


def test_class_ranking_is_scoped_school_ranking_is_not(db):
    a = make_student(db, "a", class_name="10A1", code="HS01")
    b = make_student(db, "b", class_name="11B2", code="HS02")
    add_score(db, a, "Mathematics", 6.0)
    add_score(db, b, "Mathematics", 8.0)

    assert [e["student_id"] for e in rank_class(db, "10A1", 1, "2024-2025")] == [a.id]

    school = rank_school(db, 1, "2024-2025")
    assert [(e["student_id"], e["rank"], e["class_name"]) for e in school] == [
        (b.id, 1, "11B2"),
        (a.id, 2, "10A1"),
    ]
    assert len(rank_school(db, 1, "2024-2025", limit=1)) == 1


def test_students_with_deleted_account_are_skipped(db):
    kept = make_student(db, "kept", code="HS01")
    orphan = make_student(db, "orphan", code="HS02")
    add_score(db, kept, "Mathematics", 5.0)
    add_score(db, orphan, "Mathematics", 9.0)

    db.delete(db.query(Account).filter(Account.username == "orphan").one())
    db.commit()
    db.expire_all()

    entries = rank_school(db, 1, "2024-2025")
    assert [e["student_id"] for e in entries] == [kept.id]

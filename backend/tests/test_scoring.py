import pytest

from gradebook.errors import NotFoundError, ValidationError
from gradebook.models import ScoreEntry
from gradebook.services.scoring import (
    compute_weighted_average, compute_gpa, upsert_score, upsert_score_batch,
    get_scores_by_class, get_student_scores,
)

from conftest import make_student, on_next_flush


@pytest.mark.parametrize("quiz, periodic, final, expected", [
    (8.5, 7.0, 9.0, 8.25),
    (7.0, None, None, 7.0),
    (None, 6.0, 8.0, 7.2),
    (5.0, None, 9.0, 8.0),
    (4.0, 10.0, None, 8.0),
    (None, None, 0.0, 0.0),
    (10.0, 10.0, 10.0, 10.0),
    (None, None, None, None),
])
def test_weighted_average_uses_present_components(quiz, periodic, final, expected):
    assert compute_weighted_average(quiz, periodic, final) == expected


def test_weighted_average_rounds_to_two_places():
    # (7 + 2*8 + 3*8) / 6 = 7.8333...
    assert compute_weighted_average(7.0, 8.0, 8.0) == 7.83


def test_gpa_weights_by_subject():
    entries = [
        {"weighted_avg": 8.25, "subject_weight": 2},
        {"weighted_avg": 7.0, "subject_weight": 1},
    ]
    assert compute_gpa(entries) == 7.83


def test_gpa_skips_subjects_without_average():
    entries = [
        {"weighted_avg": 6.0, "subject_weight": 1},
        {"weighted_avg": None, "subject_weight": 3},
    ]
    assert compute_gpa(entries) == 6.0


def test_gpa_is_none_without_scores():
    assert compute_gpa([]) is None
    assert compute_gpa([{"weighted_avg": None, "subject_weight": 2}]) is None


def test_gpa_rounds_half_up():
    assert compute_gpa([{"weighted_avg": 8.125, "subject_weight": 1}]) == 8.13


def test_upsert_inserts_then_updates(db):
    student = make_student(db, "an")

    first = upsert_score(db, student.id, "Mathematics", 2.0, 8.5, 7.0, 9.0, 1, "2024-2025", "teacher-1")
    assert first.weighted_avg == 8.25
    assert first.entered_by == "teacher-1"
    assert first.entered_at is not None
    assert first.updated_by is None

    second = upsert_score(db, student.id, "Mathematics", 3.0, None, None, 6.0, 1, "2024-2025", "teacher-2")
    assert second.id == first.id
    assert second.weighted_avg == 6.0
    assert second.quiz_score is None
    assert second.updated_by == "teacher-2"
    assert second.updated_at is not None
    assert second.entered_by == "teacher-1"
    # weight snapshot from the first write
    assert second.subject_weight == 2.0
    assert db.query(ScoreEntry).count() == 1


def test_upsert_separates_terms(db):
    student = make_student(db, "binh")
    upsert_score(db, student.id, "Physics", 1.0, 5.0, None, None, 1, "2024-2025", "t")
    upsert_score(db, student.id, "Physics", 1.0, 6.0, None, None, 2, "2024-2025", "t")
    upsert_score(db, student.id, "Physics", 1.0, 7.0, None, None, 1, "2025-2026", "t")
    assert db.query(ScoreEntry).count() == 3


def test_upsert_with_all_components_cleared_stores_null_average(db):
    student = make_student(db, "chi")
    entry = upsert_score(db, student.id, "History", 1.0, None, None, None, 1, "2024-2025", "t")
    assert entry.weighted_avg is None


def test_upsert_unknown_student(db):
    with pytest.raises(NotFoundError):
        upsert_score(db, "missing", "History", 1.0, 5.0, None, None, 1, "2024-2025", "t")


def test_batch_is_all_or_nothing(db):
    first = make_student(db, "dung")
    rows = [
        {"student_id": first.id, "quiz_score": 8.0, "periodic_score": None, "final_score": None},
        {"student_id": "missing", "quiz_score": 6.0, "periodic_score": None, "final_score": None},
    ]
    with pytest.raises(NotFoundError):
        upsert_score_batch(db, rows, "English", 2.0, 1, "2024-2025", "t")
    assert db.query(ScoreEntry).count() == 0


def test_batch_saves_every_row(db):
    a = make_student(db, "em")
    b = make_student(db, "giang")
    rows = [
        {"student_id": a.id, "quiz_score": 8.0, "periodic_score": 8.0, "final_score": 8.0},
        {"student_id": b.id, "quiz_score": None, "periodic_score": 5.0, "final_score": None},
    ]
    entries = upsert_score_batch(db, rows, "English", 2.0, 1, "2024-2025", "t")
    assert [e.weighted_avg for e in entries] == [8.0, 5.0]
    assert db.query(ScoreEntry).count() == 2


def test_scores_by_class_filters_when_class_given(db):
    a = make_student(db, "hoa", class_name="10A1")
    b = make_student(db, "khanh", class_name="10A2")
    upsert_score(db, a.id, "Biology", 1.0, 9.0, None, None, 1, "2024-2025", "t")
    upsert_score(db, b.id, "Biology", 1.0, 4.0, None, None, 1, "2024-2025", "t")
    upsert_score(db, b.id, "Chemistry", 1.0, 4.0, None, None, 1, "2024-2025", "t")

    everyone = get_scores_by_class(db, "Biology", 1, "2024-2025")
    assert {r["student_id"] for r in everyone} == {a.id, b.id}

    only_a = get_scores_by_class(db, "Biology", 1, "2024-2025", class_name="10A1")
    assert only_a == [{
        "student_id": a.id,
        "quiz_score": 9.0,
        "periodic_score": None,
        "final_score": None,
        "weighted_avg": 9.0,
    }]


def test_student_scores_filter_by_term(db):
    student = make_student(db, "linh")
    upsert_score(db, student.id, "Mathematics", 2.0, 8.0, None, None, 1, "2024-2025", "t")
    upsert_score(db, student.id, "Mathematics", 2.0, 6.0, None, None, 2, "2024-2025", "t")

    assert len(get_student_scores(db, student.id)) == 2
    semester_two = get_student_scores(db, student.id, semester=2, academic_year="2024-2025")
    assert [e.weighted_avg for e in semester_two] == [6.0]


def _rival_inserts_score(session_factory, student_id, subject_name):
    def insert():
        rival = session_factory()
        rival.add(ScoreEntry(
            student_id=student_id, subject_name=subject_name, subject_weight=1.0,
            quiz_score=5.0, weighted_avg=5.0, semester=1, academic_year="2024-2025",
            entered_by="rival", entered_at="2024-10-01T00:00:00+00:00",
        ))
        rival.commit()
        rival.close()
    return insert


def test_upsert_loses_race_to_concurrent_insert(db, session_factory):
    student = make_student(db, "minh")
    student_id = student.id
    on_next_flush(db, _rival_inserts_score(session_factory, student_id, "Physics"))

    with pytest.raises(ValidationError) as exc:
        upsert_score(db, student_id, "Physics", 1.0, 9.0, None, None, 1, "2024-2025", "t")
    assert exc.value.code == "DUPLICATE_NAME"

    rows = db.query(ScoreEntry).all()
    assert [(r.entered_by, r.weighted_avg) for r in rows] == [("rival", 5.0)]


def test_batch_loses_race_to_concurrent_insert(db, session_factory):
    a = make_student(db, "nam")
    b = make_student(db, "oanh")
    a_id, b_id = a.id, b.id
    on_next_flush(db, _rival_inserts_score(session_factory, a_id, "Physics"))

    rows = [
        {"student_id": a_id, "quiz_score": 8.0, "periodic_score": None, "final_score": None},
        {"student_id": b_id, "quiz_score": 7.0, "periodic_score": None, "final_score": None},
    ]
    with pytest.raises(ValidationError) as exc:
        upsert_score_batch(db, rows, "Physics", 1.0, 1, "2024-2025", "t")
    assert exc.value.code == "DUPLICATE_NAME"
    rows = db.query(ScoreEntry).all()
    assert [(r.student_id, r.entered_by) for r in rows] == [(a_id, "rival")]

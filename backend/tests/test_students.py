from gradebook.models import Account
from gradebook.services.students import list_students_by_class, list_students

from conftest import make_student


def test_students_by_class(db):
    make_student(db, "b", code="HS02", full_name="Binh", class_name="10A1")
    make_student(db, "a", code="HS01", full_name="An", class_name="10A1")
    make_student(db, "c", code="HS03", full_name="Chi", class_name="10A2")

    rows = list_students_by_class(db, "10A1")
    assert [(r["student_code"], r["student_name"]) for r in rows] == [("HS01", "An"), ("HS02", "Binh")]
    assert len(list_students(db)) == 3


def test_student_with_deleted_account_is_unknown(db):
    profile = make_student(db, "gone", code="HS01", full_name="Gone Student")
    db.delete(db.query(Account).filter(Account.username == "gone").one())
    db.commit()
    db.expire_all()

    rows = list_students_by_class(db, "10A1")
    assert rows == [{
        "student_id": profile.id,
        "student_name": "Unknown",
        "student_code": "HS01",
        "class_name": "10A1",
    }]

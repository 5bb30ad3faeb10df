"""
Student listing routes.

Listings come from student profiles; a profile whose account was
deleted is still listed, named "Unknown".
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gradebook.database import get_db
from gradebook.services import students

router = APIRouter()


@router.get("/api/students")
def list_students(db: Session = Depends(get_db)):
    return {"success": True, "rows": students.list_students(db)}


@router.get("/api/students/by-class")
def list_students_by_class(class_name: str = Query(...), db: Session = Depends(get_db)):
    return {"success": True, "rows": students.list_students_by_class(db, class_name)}

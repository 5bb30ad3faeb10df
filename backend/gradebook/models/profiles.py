"""
Student and teacher profiles.

A profile belongs to exactly one account, but account_id carries no
foreign-key constraint: deleting an account leaves its profile (and the
student's score history) in place.
"""

import uuid
from sqlalchemy import Column, Text, String
from sqlalchemy.orm import relationship
from gradebook.database import Base


class StudentProfile(Base):
    """SQLAlchemy model for the student_profiles table."""
    __tablename__ = "student_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier (referenced by score entries)")
    account_id = Column(String(36), nullable=False, unique=True,
                        doc="Owning account id")
    student_code = Column(Text, nullable=False, unique=True,
                          doc="Human-facing student code, e.g. HS000001")
    class_name = Column(Text, nullable=False,
                        doc="Class name such as 10A1 (by name, not by id)")
    grade = Column(Text, nullable=False,
                   doc="Grade level, e.g. '10'")
    date_of_birth = Column(Text, nullable=True,
                           doc="ISO 8601 date")
    academic_year = Column(Text, nullable=False,
                           doc="Academic year name, e.g. 2024-2025")

    account = relationship(
        "Account",
        primaryjoin="foreign(StudentProfile.account_id) == Account.id",
        viewonly=True,
    )
    scores = relationship("ScoreEntry", back_populates="student")

    def __repr__(self):
        return f"<StudentProfile(id={self.id}, code='{self.student_code}', class='{self.class_name}')>"


class TeacherProfile(Base):
    """SQLAlchemy model for the teacher_profiles table."""
    __tablename__ = "teacher_profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), nullable=False, unique=True)
    teacher_code = Column(Text, nullable=False, unique=True)

    account = relationship(
        "Account",
        primaryjoin="foreign(TeacherProfile.account_id) == Account.id",
        viewonly=True,
    )

    def __repr__(self):
        return f"<TeacherProfile(id={self.id}, code='{self.teacher_code}')>"

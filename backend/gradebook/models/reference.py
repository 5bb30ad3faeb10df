"""
Reference data: subjects, classes, academic years and GPA criteria bands.

These tables are referenced by name from student profiles and score
entries, so renaming a row does not touch existing records.
"""

import uuid
from sqlalchemy import Column, Text, Boolean, Float, String
from gradebook.database import Base, utc_now_iso


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False, unique=True)
    weight = Column(Float, nullable=False, default=1.0,
                    doc="Positive weight used in GPA, conventionally 1-3")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Text, nullable=False, default=utc_now_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "weight": self.weight,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }

    def __repr__(self):
        return f"<Subject(name='{self.name}', weight={self.weight})>"


class SchoolClass(Base):
    """A class such as 10A1: grade digits, letter block, sequence number."""
    __tablename__ = "classes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False, unique=True)
    grade = Column(Text, nullable=False)
    academic_year = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Text, nullable=False, default=utc_now_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "grade": self.grade,
            "academic_year": self.academic_year,
            "is_active": self.is_active,
        }

    def __repr__(self):
        return f"<SchoolClass(name='{self.name}', year='{self.academic_year}')>"


class AcademicYear(Base):
    """At most one row has is_current set."""
    __tablename__ = "academic_years"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False, unique=True)
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False, default=utc_now_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_current": self.is_current,
        }

    def __repr__(self):
        return f"<AcademicYear(name='{self.name}', current={self.is_current})>"


class AcademicCriterion(Base):
    """A configurable GPA band: min_gpa inclusive."""
    __tablename__ = "academic_criteria"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    level = Column(Text, nullable=False, unique=True)
    min_gpa = Column(Float, nullable=False)
    max_gpa = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False, default=utc_now_iso)
    updated_at = Column(Text, nullable=False, default=utc_now_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "level": self.level,
            "min_gpa": self.min_gpa,
            "max_gpa": self.max_gpa,
            "description": self.description,
        }

    def __repr__(self):
        return f"<AcademicCriterion(level='{self.level}', {self.min_gpa}-{self.max_gpa})>"

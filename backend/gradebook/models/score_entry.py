"""
ScoreEntry model - one subject's scores for one student in one term.

Holds up to three component scores (quiz, periodic test, final exam)
and the weighted average derived from them on every write.
"""

import uuid
from sqlalchemy import Column, Text, Integer, Float, ForeignKey, String, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from gradebook.database import Base


class ScoreEntry(Base):
    """
    SQLAlchemy model for the score_entries table.

    At most one row exists per (student, subject, semester, academic year).
    weighted_avg is NULL only when all three components are NULL.
    """
    __tablename__ = "score_entries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique score entry identifier")
    student_id = Column(String(36), ForeignKey("student_profiles.id"), nullable=False,
                        doc="Reference to the scored student profile")
    subject_name = Column(Text, nullable=False,
                          doc="Subject referenced by name")
    subject_weight = Column(Float, nullable=False, default=1.0,
                            doc="Subject weight at the time the entry was created")
    quiz_score = Column(Float, nullable=True,
                        doc="Quiz component, weight 1")
    periodic_score = Column(Float, nullable=True,
                            doc="Periodic test component, weight 2")
    final_score = Column(Float, nullable=True,
                         doc="Final exam component, weight 3")
    weighted_avg = Column(Float, nullable=True,
                          doc="Weighted average of the present components, 2 decimals")
    semester = Column(Integer, nullable=False,
                      doc="1 or 2")
    academic_year = Column(Text, nullable=False,
                           doc="Academic year name")
    entered_by = Column(String(36), nullable=False,
                        doc="Account id that created the entry")
    entered_at = Column(Text, nullable=False)
    updated_by = Column(String(36), nullable=True)
    updated_at = Column(Text, nullable=True)

    student = relationship("StudentProfile", back_populates="scores")

    __table_args__ = (
        UniqueConstraint("student_id", "subject_name", "semester", "academic_year",
                         name="uq_score_entries_term"),
        Index("ix_score_entries_term", "semester", "academic_year"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "subject_name": self.subject_name,
            "subject_weight": self.subject_weight,
            "quiz_score": self.quiz_score,
            "periodic_score": self.periodic_score,
            "final_score": self.final_score,
            "weighted_avg": self.weighted_avg,
            "semester": self.semester,
            "academic_year": self.academic_year,
            "entered_by": self.entered_by,
            "entered_at": self.entered_at,
            "updated_by": self.updated_by,
            "updated_at": self.updated_at,
        }

    def __repr__(self):
        return (f"<ScoreEntry(student={self.student_id}, subject='{self.subject_name}', "
                f"semester={self.semester}, avg={self.weighted_avg})>")

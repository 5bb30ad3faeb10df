from gradebook.models.account import Account, Role
from gradebook.models.profiles import StudentProfile, TeacherProfile
from gradebook.models.score_entry import ScoreEntry
from gradebook.models.reference import Subject, SchoolClass, AcademicYear, AcademicCriterion

__all__ = [
    "Account", "Role", "StudentProfile", "TeacherProfile", "ScoreEntry",
    "Subject", "SchoolClass", "AcademicYear", "AcademicCriterion",
]

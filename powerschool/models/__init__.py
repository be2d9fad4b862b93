from .academics import (
    Assignment,
    AssignmentCategory,
    AssignmentScore,
    Course,
    FinalGrade,
    ReportingTerm,
    Term,
    link_categories,
)
from .base import Many, One, Record, Relation, Scan, as_list, decode_collection, decode_record
from .school import AttendanceCode, AttendanceRecord, Event, Period, School, Teacher
from .student import PowerSchoolSession, Student, StudentInfo

__all__ = [
    "Assignment",
    "AssignmentCategory",
    "AssignmentScore",
    "AttendanceCode",
    "AttendanceRecord",
    "Course",
    "Event",
    "FinalGrade",
    "Many",
    "One",
    "Period",
    "PowerSchoolSession",
    "Record",
    "Relation",
    "ReportingTerm",
    "Scan",
    "School",
    "Student",
    "StudentInfo",
    "Teacher",
    "Term",
    "as_list",
    "decode_collection",
    "decode_record",
    "link_categories",
]

# Raw payload field -> record class, for every collection kept in the cache.
CACHED_COLLECTIONS = {
    "schools": School,
    "teachers": Teacher,
    "terms": Term,
    "reportingTerms": ReportingTerm,
    "sections": Course,
    "periods": Period,
    "assignmentCategories": AssignmentCategory,
    "assignments": Assignment,
    "assignmentScores": AssignmentScore,
    "finalGrades": FinalGrade,
    "attendanceCodes": AttendanceCode,
}

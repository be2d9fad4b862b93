"""
Academic records: terms, courses, assignments, scores and final grades.

Relations marked as scans filter a whole collection on every call. Callers
that need the result repeatedly should keep it instead of calling again.
"""
import logging
from typing import Iterable, List, Optional

from pydantic import PrivateAttr

from .base import (
    LenientBool,
    LenientDateTime,
    LenientFloat,
    LenientInt,
    LenientStr,
    Many,
    One,
    Record,
    Scan,
    raw,
)
from .school import School, Teacher

logger = logging.getLogger(__name__)


class Term(Record):
    """A term (year, semester, ...) that courses are part of."""

    collection = "terms"
    relations = {
        "school": One("schools", "school_number"),
        "courses": Scan("courses", "term_id"),
        "reporting_terms": Scan("reporting_terms", "term_id"),
    }

    title: LenientStr = None
    start_date: LenientDateTime = raw("startDate", "start_date")
    end_date: LenientDateTime = raw("endDate", "end_date")
    parent_term_id: LenientInt = raw("parentTermId", "parent_term_id")
    school_number: LenientInt = raw("schoolNumber", "school_number")
    abbreviated_title: LenientStr = raw("abbreviation", "abbreviated_title")

    def get_school(self) -> Optional[School]:
        return self.resolve("school")

    def get_courses(self) -> List["Course"]:
        """Courses in this term. Scans all courses on every call."""
        return self.resolve("courses")

    def get_reporting_terms(self) -> List["ReportingTerm"]:
        """Reporting terms of this term. Scans all reporting terms on every call."""
        return self.resolve("reporting_terms")


class ReportingTerm(Record):
    """A reporting term; marks are divided and given out per reporting term."""

    collection = "reporting_terms"
    relations = {
        "term": One("terms", "term_id"),
        "final_grades": Scan("final_grades", "reporting_term_id"),
    }

    title: LenientStr = None
    term_id: LenientInt = raw("termid", "termId", "term_id")
    sort_order: LenientInt = raw("sortOrder", "sort_order")
    suppress_grades: LenientBool = raw("suppressGrades", "suppress_grades")
    suppress_percents: LenientBool = raw("suppressPercents", "suppress_percents")
    abbreviated_title: LenientStr = raw("abbreviation", "abbreviated_title")

    def get_term(self) -> Optional[Term]:
        return self.resolve("term")

    def get_final_grades(self) -> List["FinalGrade"]:
        """Final grades given in this reporting term. Scans all final grades on every call."""
        return self.resolve("final_grades")


class Course(Record):
    """A course section the student is enrolled in (raw field `sections`)."""

    collection = "courses"
    relations = {
        "term": One("terms", "term_id"),
        "school": One("schools", "school_number"),
        "teacher": One("teachers", "teacher_id"),
        "final_grade": One("final_grades", "id"),
        "final_grades": Many("final_grades", "id"),
        "assignments": Scan("assignments", "course_id"),
    }

    title: LenientStr = raw("schoolCourseTitle", "title")
    code: LenientStr = raw("courseCode", "code")
    school_number: LenientInt = raw("schoolNumber", "school_number")
    term_id: LenientInt = raw("termID", "termId", "term_id")
    period_sort: LenientInt = raw("periodSort", "period_sort")
    room_name: LenientStr = raw("roomName", "room_name")
    section_number: LenientStr = raw("sectionNum", "section_number")
    teacher_id: LenientInt = raw("teacherID", "teacherId", "teacher_id")
    expression: LenientStr = None
    grade_book_type: LenientInt = raw("gradeBookType", "grade_book_type")
    description: LenientStr = None

    def get_term(self) -> Optional[Term]:
        return self.resolve("term")

    def get_school(self) -> Optional[School]:
        return self.resolve("school")

    def get_teacher(self) -> Optional[Teacher]:
        return self.resolve("teacher")

    def get_final_grade(self) -> Optional["FinalGrade"]:
        """The first final grade stored for this course, or None if none yet."""
        return self.resolve("final_grade")

    def get_final_grades(self) -> List["FinalGrade"]:
        """Every final grade for this course (one per reporting term), in payload order."""
        return self.resolve("final_grades")

    def get_assignments(self) -> List["Assignment"]:
        """
        Assignments of this course.
        NOTE: filters through all assignments every time it is called, so use it sparingly.
        """
        return self.resolve("assignments")


class Assignment(Record):
    collection = "assignments"
    relations = {
        "score": One("assignment_scores", "id"),
        "scores": Many("assignment_scores", "id"),
        "category": One("assignment_categories", "category_id"),
        "course": One("courses", "course_id"),
    }

    assignment_id: LenientInt = raw("assignmentid", "assignmentId", "assignmentID", "assignment_id")
    name: LenientStr = None
    abbreviation: LenientStr = None
    category_id: LenientInt = raw("categoryId", "categoryid", "categoryID", "category_id")
    course_id: LenientInt = raw("sectionid", "sectionId", "courseID", "course_id")
    description: LenientStr = None
    due_date: LenientDateTime = raw("dueDate", "due_date")
    grade_book_type: LenientInt = raw("gradeBookType", "grade_book_type")
    weight: LenientFloat = None
    include_in_final_grades: LenientBool = raw("includeinfinalgrades", "includeInFinalGrades", "include_in_final_grades")
    publish_scores: LenientBool = raw("publishscores", "publishScores", "publish_scores")
    score_publish_date: LenientDateTime = raw("publishonspecificdate", "scorePublishDate", "score_publish_date")

    def get_score(self) -> Optional["AssignmentScore"]:
        """The score received on this assignment, if available."""
        return self.resolve("score")

    def get_category(self) -> Optional["AssignmentCategory"]:
        return self.resolve("category")

    def get_course(self) -> Optional[Course]:
        return self.resolve("course")


class AssignmentCategory(Record):
    """A category of assignments. `assignments` is filled once per fetch by link_categories()."""

    collection = "assignment_categories"

    name: LenientStr = None
    abbreviation: LenientStr = None
    description: LenientStr = None
    grade_book_type: LenientInt = raw("gradeBookType", "grade_book_type")

    _assignments: List[Assignment] = PrivateAttr(default_factory=list)

    @property
    def assignments(self) -> List[Assignment]:
        return self._assignments


class AssignmentScore(Record):
    """The score received for an assignment. Keyed by assignment id, several per assignment allowed."""

    collection = "assignment_scores"
    key_field = "assignment_id"
    unique_key = False
    relations = {"assignment": One("assignments", "assignment_id")}

    assignment_id: LenientInt = raw("assignmentId", "assignmentid", "assignmentID", "assignment_id")
    collected: LenientBool = None
    late: LenientBool = None
    missing: LenientBool = None
    exempt: LenientBool = None
    grade_book_type: LenientInt = raw("gradeBookType", "grade_book_type")
    comment: LenientStr = raw("commentValue", "comment")
    score: LenientStr = None
    percentage: LenientFloat = raw("percent", "percentage")
    letter_grade: LenientStr = raw("letterGrade", "letter_grade")
    score_type: LenientInt = raw("scoretype", "scoreType", "score_type")

    def get_assignment(self) -> Optional[Assignment]:
        return self.resolve("assignment")


class FinalGrade(Record):
    """The final grade in a course for one reporting term. Keyed by course id."""

    collection = "final_grades"
    key_field = "course_id"
    unique_key = False
    relations = {
        "reporting_term": One("reporting_terms", "reporting_term_id"),
        "course": One("courses", "course_id"),
    }

    grade: LenientStr = None
    percentage: LenientFloat = raw("percent", "percentage")
    date: LenientDateTime = raw("storeDate", "date")
    comment: LenientStr = raw("commentValue", "comment")
    reporting_term_id: LenientInt = raw("reportingTermId", "reportingtermid", "reporting_term_id")
    course_id: LenientInt = raw("sectionid", "sectionId", "courseID", "course_id")

    def get_reporting_term(self) -> Optional[ReportingTerm]:
        return self.resolve("reporting_term")

    def get_course(self) -> Optional[Course]:
        return self.resolve("course")


def link_categories(categories: Iterable[AssignmentCategory], assignments: Iterable[Assignment]) -> int:
    """
    Append every assignment to its category's `assignments` list, once.
    Assignments whose category is not in `categories` are skipped.
    Returns the number of assignments linked.
    """
    by_id = {category.id: category for category in categories if category.id is not None}
    linked = 0
    dropped = 0
    for assignment in assignments:
        category = by_id.get(assignment.category_id)
        if category is None:
            dropped += 1
            continue
        category.assignments.append(assignment)
        linked += 1
    if dropped:
        logger.debug(f"{dropped} assignment(s) reference no known category and were not linked")
    return linked

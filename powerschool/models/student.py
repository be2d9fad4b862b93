"""
The student record, the per-fetch StudentInfo snapshot and the login session.
"""
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from powerschool.core.cache import RelationalCache

from .academics import (
    Assignment,
    AssignmentCategory,
    AssignmentScore,
    Course,
    FinalGrade,
    ReportingTerm,
    Term,
)
from .base import (
    LenientDateTime,
    LenientFloat,
    LenientInt,
    LenientStr,
    Record,
    Relation,
    as_list,
    raw,
)
from .school import AttendanceCode, AttendanceRecord, Event, Period, School, Teacher


class CurrentReportingTerm(Relation):
    """Reporting term named by the student's `current_term` (matched on id, title or abbreviation)."""

    def __init__(self):
        super().__init__("reporting_terms", "current_term")

    def resolve(self, record: Record, cache: RelationalCache) -> Optional[ReportingTerm]:
        current = getattr(record, self.attr)
        if current is None:
            return None
        for term in cache.lookup_all(self.collection):
            if current in (str(term.id), term.title, term.abbreviated_title):
                return term
        return None


class Student(Record):
    """Basic information about the student."""

    relations = {"current_reporting_term": CurrentReportingTerm()}

    first_name: LenientStr = raw("firstName", "first_name")
    middle_name: LenientStr = raw("middleName", "middle_name")
    last_name: LenientStr = raw("lastName", "last_name")
    date_of_birth: LenientDateTime = raw("dob", "dateOfBirth", "date_of_birth")
    ethnicity: LenientStr = None
    gender: LenientStr = None
    grade_level: LenientInt = raw("gradeLevel", "grade_level")
    current_gpa: LenientStr = raw("currentGPA", "currentGpa", "current_gpa")
    current_term: LenientStr = raw("currentTerm", "current_term")
    photo_date: LenientDateTime = raw("photoDate", "photo_date")
    current_meal_balance: LenientFloat = raw("currentMealBalance", "current_meal_balance")
    starting_meal_balance: LenientFloat = raw("startingMealBalance", "starting_meal_balance")

    def get_name_parts(self, include_middle_name: bool = False) -> List[str]:
        parts = [self.first_name, self.middle_name if include_middle_name else None, self.last_name]
        return [part for part in parts if part]

    def get_formatted_name(self, include_middle_name: bool = False) -> str:
        return " ".join(self.get_name_parts(include_middle_name))

    def get_current_reporting_term(self) -> Optional[ReportingTerm]:
        return self.resolve("current_reporting_term")


class StudentInfo(BaseModel):
    """Everything one fetch returned. Records in it resolve relations through that fetch's cache."""

    model_config = ConfigDict(frozen=True)

    student: Student
    year_id: LenientInt = None
    schools: List[School] = Field(default_factory=list)
    teachers: List[Teacher] = Field(default_factory=list)
    periods: List[Period] = Field(default_factory=list)
    courses: List[Course] = Field(default_factory=list)
    terms: List[Term] = Field(default_factory=list)
    reporting_terms: List[ReportingTerm] = Field(default_factory=list)
    not_in_session_days: List[Event] = Field(default_factory=list)
    assignment_categories: List[AssignmentCategory] = Field(default_factory=list)
    assignments: List[Assignment] = Field(default_factory=list)
    assignment_scores: List[AssignmentScore] = Field(default_factory=list)
    attendance_records: List[AttendanceRecord] = Field(default_factory=list)
    attendance_codes: List[AttendanceCode] = Field(default_factory=list)
    final_grades: List[FinalGrade] = Field(default_factory=list)


class PowerSchoolSession(BaseModel):
    """The session returned by a successful login (raw `userSessionVO`)."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("userId", "user_id"))
    user_type: Optional[int] = Field(default=None, validation_alias=AliasChoices("userType", "user_type"))
    service_ticket: Optional[str] = Field(default=None, validation_alias=AliasChoices("serviceTicket", "service_ticket"))
    student_ids: Annotated[List[int], BeforeValidator(as_list)] = Field(
        default_factory=list, validation_alias=AliasChoices("studentIDs", "studentIds", "student_ids")
    )
    locale: Optional[str] = None
    server_current_time: Optional[Any] = Field(
        default=None, validation_alias=AliasChoices("serverCurrentTime", "server_current_time")
    )
    server_info: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("serverInfo", "server_info"))

    @property
    def api_version(self) -> Optional[str]:
        return self.server_info.get("apiVersion")

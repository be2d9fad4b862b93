"""
School-side records: schools, teachers, periods, calendar events and attendance.
"""
from typing import List, Optional

from .base import (
    LenientBool,
    LenientDateTime,
    LenientInt,
    LenientMapping,
    LenientStr,
    One,
    Record,
    Scan,
    raw,
)


class School(Record):
    """A school. Keyed by school number, which is what other records reference."""

    collection = "schools"
    key_field = "school_number"
    relations = {
        "attendance_codes": Scan("attendance_codes", "school_number", attr="school_number"),
    }

    name: LenientStr = None
    school_number: LenientInt = raw("schoolNumber", "school_number")
    formatted_address: LenientStr = raw("formattedAddress", "formatted_address")
    address_parts: LenientMapping = raw("addressParts", "address_parts")
    phone: LenientStr = raw("schoolphone", "phone")
    fax: LenientStr = raw("schoolfax", "fax")
    low_grade: LenientInt = raw("lowGrade", "low_grade")
    high_grade: LenientInt = raw("highGrade", "high_grade")
    disabled: LenientBool = raw("schoolDisabled", "disabled")
    disabled_message: LenientMapping = raw("schoolDisabledMessage", "disabled_message")
    disabled_features: LenientMapping = raw("disabledFeatures", "disabled_features")
    abbreviation: LenientStr = None

    def get_attendance_codes(self) -> List["AttendanceCode"]:
        """Attendance codes defined by this school. Scans all codes on every call."""
        return self.resolve("attendance_codes")


class Teacher(Record):
    collection = "teachers"

    first_name: LenientStr = raw("firstName", "first_name")
    last_name: LenientStr = raw("lastName", "last_name")
    email: LenientStr = None
    school_phone: LenientStr = raw("schoolPhone", "school_phone")

    def get_name_parts(self) -> List[str]:
        return [part for part in (self.first_name, self.last_name) if part]

    def get_formatted_name(self) -> str:
        return " ".join(self.get_name_parts())


class Period(Record):
    collection = "periods"
    relations = {"school": One("schools", "school_number")}

    name: LenientStr = None
    number: LenientInt = raw("periodNumber", "number")
    school_number: LenientInt = raw("schoolNumber", "school_number")
    sort_order: LenientInt = raw("sortOrder", "sort_order")
    year_id: LenientInt = raw("yearId", "yearid", "year_id")

    def get_school(self) -> Optional[School]:
        return self.resolve("school")


class Event(Record):
    """A calendar event, such as a day school is not in session."""

    relations = {"school": One("schools", "school_number")}

    type: LenientStr = raw("calType", "type")
    date: LenientDateTime = raw("calendarDay", "date")
    description: LenientStr = None
    school_number: LenientInt = raw("schoolNumber", "school_number")

    def get_school(self) -> Optional[School]:
        return self.resolve("school")


class AttendanceCode(Record):
    collection = "attendance_codes"
    relations = {"school": One("schools", "school_number")}

    code: LenientStr = raw("attCode", "code")
    description: LenientStr = None
    type: LenientInt = raw("codeType", "type")
    school_number: LenientInt = raw("schoolid", "schoolNumber", "school_number")
    sort_order: LenientInt = raw("sortOrder", "sort_order")
    year_id: LenientInt = raw("yearid", "yearId", "year_id")

    def get_school(self) -> Optional[School]:
        return self.resolve("school")


class AttendanceRecord(Record):
    """A deviation from normal attendance (absence, tardy, ...)."""

    relations = {
        "school": One("schools", "school_number"),
        "period": One("periods", "period_id"),
        "code": One("attendance_codes", "code_id"),
    }

    code_id: LenientInt = raw("attCodeid", "code_id")
    comment: LenientStr = raw("attComment", "comment")
    date: LenientDateTime = raw("attDate", "date")
    school_number: LenientInt = raw("schoolid", "schoolNumber", "school_number")
    period_id: LenientInt = raw("periodid", "period_id")
    student_id: LenientInt = raw("studentid", "student_id")
    total_minutes: LenientInt = raw("totalMinutes", "total_minutes")

    def get_school(self) -> Optional[School]:
        return self.resolve("school")

    def get_period(self) -> Optional[Period]:
        return self.resolve("period")

    def get_code(self) -> Optional[AttendanceCode]:
        return self.resolve("code")

"""
A logged-in PowerSchool user and the student data fetch.

One fetch: request the flat payload, decode every collection, store them in a
new RelationalCache, link assignments into their categories and return a
StudentInfo snapshot. The new cache and snapshot replace the previous ones only
after every step succeeded.
"""
import logging
import threading
from datetime import timezone
from typing import Any, Dict, Mapping, Optional

from powerschool.core.cache import RelationalCache
from powerschool.core.exceptions import MalformedPayloadError
from powerschool.models import (
    CACHED_COLLECTIONS,
    AttendanceRecord,
    Event,
    PowerSchoolSession,
    Student,
    StudentInfo,
    as_list,
    decode_collection,
    decode_record,
    link_categories,
)
from powerschool.models.base import parse_datetime

logger = logging.getLogger(__name__)


def _iso_timestamp(value: Any) -> Any:
    """Format a server time as ISO 8601 UTC with milliseconds, which the service expects back."""
    parsed = parse_datetime(value)
    if parsed is None:
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def extract_student_data(result: Any) -> Mapping[str, Any]:
    """Return the `return.studentDataVOs` mapping of a getStudentData result."""
    returned = result.get("return") if isinstance(result, Mapping) else None
    if not isinstance(returned, Mapping) or returned.get("studentDataVOs") is None:
        keys = list(result.keys()) if isinstance(result, Mapping) else type(result).__name__
        raise MalformedPayloadError(
            "getStudentData result has no return.studentDataVOs",
            details={"keys": keys},
        )
    entries = as_list(returned["studentDataVOs"])
    if not entries or not isinstance(entries[0], Mapping):
        raise MalformedPayloadError("getStudentData returned no student data object")
    if len(entries) > 1:
        logger.warning(f"getStudentData returned {len(entries)} students; using the first one")
    return entries[0]


def assemble_student_info(data: Mapping[str, Any], cache: RelationalCache) -> StudentInfo:
    """Decode one student's flat payload into `cache` and return the snapshot.

    Raises RecordDecodeError/MalformedPayloadError before `cache` is populated
    if any collection cannot be decoded.
    """
    decoded: Dict[str, list] = {
        field: decode_collection(record_cls, data.get(field), cache, name=field)
        for field, record_cls in CACHED_COLLECTIONS.items()
    }
    events = decode_collection(Event, data.get("notInSessionDays"), cache, name="notInSessionDays")
    attendance = decode_collection(AttendanceRecord, data.get("attendance"), cache, name="attendance")

    students = as_list(data.get("student"))
    if not students:
        raise MalformedPayloadError("Student data has no student record")
    student = decode_record(Student, students[0], cache, name="student")

    for field, record_cls in CACHED_COLLECTIONS.items():
        cache.store(
            record_cls.collection,
            decoded[field],
            key_field=record_cls.key_field,
            unique=record_cls.unique_key,
        )
    # Duplicate keys are collapsed by the cache; the snapshot lists what it kept.
    stored = {field: cache.lookup_all(record_cls.collection) for field, record_cls in CACHED_COLLECTIONS.items()}

    linked = link_categories(stored["assignmentCategories"], stored["assignments"])
    logger.debug(f"Linked {linked} assignment(s) into {len(stored['assignmentCategories'])} categories")

    return StudentInfo(
        student=student,
        year_id=data.get("yearId"),
        schools=stored["schools"],
        teachers=stored["teachers"],
        periods=stored["periods"],
        courses=stored["sections"],
        terms=stored["terms"],
        reporting_terms=stored["reportingTerms"],
        not_in_session_days=events,
        assignment_categories=stored["assignmentCategories"],
        assignments=stored["assignments"],
        assignment_scores=stored["assignmentScores"],
        attendance_records=attendance,
        attendance_codes=stored["attendanceCodes"],
        final_grades=stored["finalGrades"],
    )


class PowerSchoolUser:
    """A PowerSchool account, holding its session and the data of its last fetch."""

    def __init__(self, session: PowerSchoolSession, api: Any):
        if session.server_current_time is not None:
            session = session.model_copy(
                update={"server_current_time": _iso_timestamp(session.server_current_time)}
            )
        self.session = session
        self.api = api
        self.user_id = session.user_id
        self.user_type = session.user_type
        self.cache: Optional[RelationalCache] = None
        self.student_info: Optional[StudentInfo] = None
        self.logger = logging.getLogger(self.__class__.__name__)
        self._fetch_lock = threading.Lock()

    def build_request(self) -> Dict[str, Any]:
        """The getStudentData arguments for this session."""
        return {
            "userSessionVO": {
                "userId": self.user_id,
                "serviceTicket": self.session.service_ticket,
                "serverInfo": {"apiVersion": self.session.api_version},
                "serverCurrentTime": self.session.server_current_time,
                "userType": self.user_type,
            },
            "studentIDs": self.session.student_ids,
            "qil": {"includes": "1"},
        }

    def get_student_info(self) -> StudentInfo:
        """
        Fetch this account's student data.
        Raises FetchError (TransportError or MalformedPayloadError); on failure the
        previous cache and student_info stay as they were.
        """
        with self._fetch_lock:
            self.logger.info(f"Fetching student data for user {self.user_id}")
            result = self.api.transport.get_student_data(self.build_request())
            data = extract_student_data(result)

            cache = RelationalCache()
            student_info = assemble_student_info(data, cache)

            self.cache, self.student_info = cache, student_info
            self.logger.info(
                f"Fetched {len(student_info.courses)} course(s), "
                f"{len(student_info.assignments)} assignment(s) for user {self.user_id}"
            )
            return student_info

    def __repr__(self) -> str:
        return f"PowerSchoolUser(user_id={self.user_id!r}, user_type={self.user_type!r})"

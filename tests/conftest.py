import copy
from typing import Any, Dict, List

import pytest

from powerschool.client import PowerSchoolAPI, PowerSchoolUser, Transport
from powerschool.models import PowerSchoolSession

SESSION_DATA = {
    "userId": 555,
    "userType": 2,
    "serviceTicket": "ticket-abc",
    "studentIDs": 1234,
    "locale": "en_US",
    "serverCurrentTime": "2019-09-15T14:30:00.250Z",
    "serverInfo": {"apiVersion": "2.1.1", "timeZoneName": "CST"},
}

STUDENT_DATA = {
    # The service sends a single object here for one-school accounts.
    "schools": {
        "id": 1,
        "name": "Springfield High",
        "schoolNumber": 100,
        "schoolphone": "555-0100",
        "lowGrade": "9",
        "highGrade": "12",
        "schoolDisabled": "false",
        "addressParts": {"city": "Springfield"},
    },
    "teachers": [
        {"id": 20, "firstName": "Edna", "lastName": "Krabappel", "email": "ek@example.org"},
    ],
    "terms": [
        {"id": 5, "title": "Fall", "startDate": "2019-09-03T00:00:00.000Z", "endDate": "2019-12-20",
         "schoolNumber": 100, "abbreviation": "F"},
        {"id": 6, "title": "Spring", "startDate": "2020-01-06", "schoolNumber": 100},
    ],
    "reportingTerms": [
        {"id": 50, "title": "Quarter 1", "termid": 5, "abbreviation": "Q1", "sortOrder": 1,
         "suppressGrades": False, "suppressPercents": "0"},
    ],
    "sections": [
        {"id": 10, "schoolCourseTitle": "Algebra II", "courseCode": "MA200", "termID": 5,
         "schoolNumber": 100, "teacherID": 20, "periodSort": 1, "roomName": "101", "sectionNum": "2"},
        {"id": 11, "schoolCourseTitle": "Biology", "courseCode": "SC110", "termID": 6,
         "schoolNumber": 100, "teacherID": 99, "periodSort": 2},
    ],
    "periods": [
        {"id": 7, "name": "P1", "periodNumber": 1, "schoolNumber": 100, "sortOrder": 1, "yearId": 29},
    ],
    "assignmentCategories": [
        {"id": 300, "name": "Homework", "abbreviation": "HW"},
        {"id": 301, "name": "Tests", "abbreviation": "T"},
    ],
    "assignments": [
        {"id": 1, "assignmentid": 1001, "name": "Worksheet 1", "categoryId": 300, "sectionid": 10,
         "dueDate": "2019-09-10T00:00:00.000Z", "weight": "1.0", "includeinfinalgrades": "1",
         "publishscores": "true"},
        {"id": 2, "assignmentid": 1002, "name": "Unit Test", "categoryId": 301, "sectionid": 10,
         "dueDate": "TBD"},
        {"id": 3, "assignmentid": 1003, "name": "Lab Report", "categoryId": 300, "sectionid": 11},
        {"id": 4, "assignmentid": 1004, "name": "Orphan", "categoryId": 999, "sectionid": 11},
    ],
    "assignmentScores": [
        {"id": 900, "assignmentId": 1, "score": "9/10", "percent": "90", "letterGrade": "A-",
         "late": "false", "missing": False},
        {"id": 901, "assignmentId": 1, "score": "10/10", "percent": 100, "commentValue": "Resubmitted"},
        {"id": 902, "assignmentId": 2, "score": "45/50", "percent": "90"},
    ],
    "finalGrades": [
        {"id": 600, "grade": "A", "percent": "93", "sectionid": 10, "reportingTermId": 50,
         "storeDate": "2019-11-02"},
    ],
    "attendanceCodes": [
        {"id": 40, "attCode": "A", "description": "Absent", "schoolid": 100, "codeType": "1"},
    ],
    "notInSessionDays": [
        {"id": 70, "calType": "holiday", "calendarDay": "2019-11-28", "description": "Thanksgiving",
         "schoolNumber": 100},
    ],
    "attendance": [
        {"id": 80, "attCodeid": 40, "attDate": "2019-09-12", "schoolid": 100, "periodid": 7,
         "studentid": 1234, "totalMinutes": 0},
    ],
    "student": {
        "id": 1234,
        "firstName": "Lisa",
        "middleName": "Marie",
        "lastName": "Simpson",
        "dob": "2008-05-09",
        "gradeLevel": "10",
        "currentGPA": "4.0",
        "currentTerm": "Q1",
        "currentMealBalance": "12.5",
    },
    "yearId": 29,
}


class FakeTransport(Transport):
    """Transport returning queued results; exceptions in the queue are raised."""

    def __init__(self):
        self.results: List[Any] = []
        self.login_result: Any = None
        self.requests: List[Dict[str, Any]] = []
        self.logins: List[tuple] = []
        self.closed = False

    def login(self, username, password):
        self.logins.append((username, password))
        if isinstance(self.login_result, Exception):
            raise self.login_result
        return self.login_result

    def get_student_data(self, request):
        self.requests.append(request)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True


@pytest.fixture()
def make_student_data():
    def _make(**overrides):
        data = copy.deepcopy(STUDENT_DATA)
        data.update(overrides)
        return data
    return _make


@pytest.fixture()
def wrap_result():
    def _wrap(student_data):
        return {"return": {"studentDataVOs": student_data}}
    return _wrap


@pytest.fixture()
def session_data():
    return copy.deepcopy(SESSION_DATA)


@pytest.fixture()
def session(session_data):
    return PowerSchoolSession.model_validate(session_data)


@pytest.fixture()
def fake_transport():
    return FakeTransport()


@pytest.fixture()
def api(fake_transport):
    return PowerSchoolAPI("https://ps.example.org", transport=fake_transport)


@pytest.fixture()
def user(session, api):
    return PowerSchoolUser(session, api)

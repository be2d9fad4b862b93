from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from powerschool.core.cache import RelationalCache
from powerschool.core.exceptions import RecordDecodeError, UnboundRecordError
from powerschool.models import (
    Assignment,
    AssignmentScore,
    Course,
    School,
    Student,
    Teacher,
    as_list,
    decode_collection,
    decode_record,
)
from powerschool.models.base import parse_datetime


def test_raw_aliases_and_python_names_both_decode():
    from_raw = Course.from_data({"id": 10, "schoolCourseTitle": "Algebra II", "termID": "5"})
    from_python = Course.from_data({"id": 10, "title": "Algebra II", "term_id": 5})

    assert from_raw.title == from_python.title == "Algebra II"
    assert from_raw.term_id == from_python.term_id == 5


def test_unparsable_fields_become_none_without_failing_the_record():
    assignment = Assignment.from_data({
        "id": "7",
        "name": "Essay",
        "weight": "heavy",
        "dueDate": "TBD",
        "publishscores": "maybe",
        "categoryId": {"nested": True},
    })

    assert assignment.id == 7
    assert assignment.name == "Essay"
    assert assignment.weight is None
    assert assignment.due_date is None
    assert assignment.publish_scores is None
    assert assignment.category_id is None


def test_lenient_scalar_coercion():
    score = AssignmentScore.from_data({
        "assignmentId": "12.0",
        "percent": "87.5",
        "late": "true",
        "missing": 0,
        "exempt": "N",
        "score": 9,
    })

    assert score.assignment_id == 12
    assert score.percentage == 87.5
    assert score.late is True
    assert score.missing is False
    assert score.exempt is False
    assert score.score == "9"


def test_unknown_fields_are_ignored():
    teacher = Teacher.from_data({"id": 1, "firstName": "Ned", "shoeSize": 11})

    assert teacher.first_name == "Ned"
    assert not hasattr(teacher, "shoeSize")


def test_school_mapping_fields():
    school = School.from_data({"schoolNumber": "100", "addressParts": "not a mapping", "schoolDisabled": "0"})

    assert school.school_number == 100
    assert school.address_parts is None
    assert school.disabled is False


def test_parse_datetime_formats():
    assert parse_datetime("2019-09-10T00:00:00.000Z") == datetime(2019, 9, 10, tzinfo=timezone.utc)
    assert parse_datetime("2019-11-02") == datetime(2019, 11, 2)
    assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_datetime("") is None
    assert parse_datetime(None) is None
    assert parse_datetime(True) is None


def test_as_list_normalizes_single_objects():
    assert as_list(None) == []
    assert as_list({"id": 1}) == [{"id": 1}]
    assert as_list([{"id": 1}, {"id": 2}]) == [{"id": 1}, {"id": 2}]
    assert as_list(()) == []


def test_decode_collection_accepts_single_object_and_missing_field():
    assert [c.id for c in decode_collection(Course, {"id": 10})] == [10]
    assert decode_collection(Course, None) == []


def test_decode_collection_rejects_non_object_elements():
    with pytest.raises(RecordDecodeError) as exc_info:
        decode_collection(Course, [{"id": 10}, "garbage"], name="sections")

    assert exc_info.value.collection == "sections"
    assert exc_info.value.index == 1
    assert "sections[1]" in str(exc_info.value)


def test_decode_record_binds_cache():
    cache = RelationalCache()
    course = decode_record(Course, {"id": 10}, cache)

    assert course.cache is cache


def test_records_are_immutable():
    course = Course.from_data({"id": 10, "schoolCourseTitle": "Algebra II"})

    with pytest.raises(ValidationError):
        course.title = "Geometry"


def test_unbound_record_cannot_resolve():
    course = Course.from_data({"id": 10, "termID": 5})

    with pytest.raises(UnboundRecordError):
        course.get_term()


def test_unknown_relation_name():
    course = Course.from_data({"id": 10}, RelationalCache())

    with pytest.raises(KeyError):
        course.resolve("homeroom")


def test_student_name_formatting():
    student = Student.from_data({"firstName": "Lisa", "middleName": "Marie", "lastName": "Simpson"})

    assert student.get_name_parts() == ["Lisa", "Simpson"]
    assert student.get_formatted_name() == "Lisa Simpson"
    assert student.get_formatted_name(include_middle_name=True) == "Lisa Marie Simpson"


def test_teacher_name_skips_missing_parts():
    assert Teacher.from_data({"lastName": "Hoover"}).get_formatted_name() == "Hoover"
    assert Teacher.from_data({"firstName": "Elizabeth", "lastName": "Hoover"}).get_name_parts() == [
        "Elizabeth",
        "Hoover",
    ]

import pytest

from coaching_analytics.core.exceptions import ValidationError
from coaching_analytics.marks.model import StudentMark
from coaching_analytics.marks.schemas import BulkMarksRequest, SetMarksRequest


def test_max_marks_defaults_to_100():
    req = SetMarksRequest.from_payload({"testId": "T1", "studentId": "S1", "marks": "42.5"})
    assert req.mark == StudentMark(42.5, 100.0)


@pytest.mark.parametrize(
    "payload",
    [
        {"studentId": "S1", "marks": 1},
        {"testId": "T1", "studentId": "S1"},
        {"testId": "T1", "studentId": "S1", "marks": "abc"},
        {"testId": "T1", "studentId": "S1", "marks": -1},
        {"testId": "T1", "studentId": "S1", "marks": 51, "maxMarks": 50},
        {"testId": "T1", "studentId": "S1", "marks": 0, "maxMarks": 0},
        {"testId": "T1", "studentId": "S1", "marks": True},
    ],
)
def test_set_marks_rejects_invalid_payloads(payload):
    with pytest.raises(ValidationError):
        SetMarksRequest.from_payload(payload)


def test_bulk_requires_students_array():
    with pytest.raises(ValidationError):
        BulkMarksRequest.from_payload({"testId": "T1", "classId": "C1", "subjectId": "SUB1", "students": {}})


def test_bulk_error_names_the_offending_student():
    with pytest.raises(ValidationError) as exc:
        BulkMarksRequest.from_payload(
            {"testId": "T1", "classId": "C1", "subjectId": "SUB1", "students": [{"studentId": "S9", "marks": 101}]}
        )
    assert "S9" in str(exc.value)


def test_percentage_handles_zero_max():
    assert StudentMark(10, 0).percentage == 0.0
    assert StudentMark(45, 50).percentage == 90.0

from datetime import date, datetime

from coaching_analytics.marks.model import StudentMark
from coaching_analytics.stats.schemas import MarksStatsQuery

MID = "m1"
NOW = datetime(2024, 1, 12, 18, 0)


def _put(world, test_id, student_id, marks, max_marks=100.0):
    test = world.tests.get_by_id(MID, test_id)
    world.marks.merge_student_mark(
        management_id=MID,
        test_id=test_id,
        class_id=test.class_id,
        subject_id=test.subject_id,
        student_id=student_id,
        mark=StudentMark(marks, max_marks),
        now=NOW,
    )


def _seed(world):
    _put(world, "T1", "S1", 80)
    _put(world, "T1", "S2", 70)
    _put(world, "T2", "S3", 30, 40)
    _put(world, "T2", "S4", 45, 60)


def _build(world, **kwargs):
    return world.container.marks_stats_service.build(MID, MarksStatsQuery(**kwargs)).to_dict()


def test_overall_averages(world):
    _seed(world)

    stats = _build(world, end_date=date(2024, 1, 10))["stats"]

    assert stats == {
        "totalTests": 2,
        "totalStudents": 4,
        "averageMarks": 56.25,
        "averagePercentage": 75.0,
        "totalRecords": 4,
    }


def test_subjects_with_same_name_merge_across_classes(world):
    _seed(world)

    result = _build(world)

    assert result["subjectAverages"] == [
        {
            "subjectId": "math",
            "subjectName": " Math ",
            "averageMarks": 56.25,
            "averagePercentage": 75.0,
            "totalMarks": 225.0,
            "totalMaxMarks": 300.0,
            "count": 4,
        }
    ]
    (row,) = result["chartData"]
    assert row["date"] == "2024-01-10"
    assert row["subjects"] == {"math": {"name": " Math ", "averagePercentage": 75.0}}
    assert row["classes"] == {
        "C1": {"name": "Physics A", "averagePercentage": 75.0},
        "C2": {"name": "Chemistry B", "averagePercentage": 75.0},
    }


def test_single_class_keys_subjects_by_id(world):
    _seed(world)
    _put(world, "T3", "S1", 18, 20)

    result = _build(world, class_id="C1")

    assert [r["date"] for r in result["chartData"]] == ["2024-01-10", "2024-01-12"]
    assert result["chartData"][0]["subjects"] == {"SUB1": {"name": " Math ", "averagePercentage": 75.0}}
    assert result["chartData"][1]["subjects"] == {"SUB3": {"name": "Physics", "averagePercentage": 90.0}}
    assert "classes" not in result["chartData"][0]
    assert result["subjectAverages"] == []


def test_student_stats_are_enriched_from_directory(world):
    _seed(world)
    _put(world, "T3", "S1", 18, 20)

    students = {s["studentId"]: s for s in _build(world)["studentStats"]}

    alice = students["S1"]
    assert alice["studentName"] == "Alice"
    assert alice["studentEmail"] == "alice@example.com"
    assert alice["batch"] == "Batch-7"
    assert alice["testCount"] == 2
    assert alice["totalMarks"] == 98.0
    assert alice["averageMarks"] == 49.0
    assert alice["averagePercentage"] == 98.0 * 100 / 120
    assert {t["testId"]: t["percentage"] for t in alice["tests"]} == {"T1": 80.0, "T3": 90.0}


def test_students_missing_from_directory_are_left_out(world):
    _seed(world)
    _put(world, "T1", "GONE", 10)

    result = _build(world)

    assert "GONE" not in {s["studentId"] for s in result["studentStats"]}
    assert result["stats"]["totalRecords"] == 5


def test_batch_filter_limits_records(world):
    _seed(world)

    result = _build(world, batch="Batch-8")

    assert [s["studentId"] for s in result["studentStats"]] == ["S3"]
    assert result["stats"]["averagePercentage"] == 75.0
    assert result["stats"]["totalRecords"] == 1


def test_empty_batch_returns_zeroes(world):
    _seed(world)

    assert _build(world, batch="Batch-99") == {
        "chartData": [],
        "stats": {"totalTests": 0, "totalStudents": 0, "averageMarks": 0.0, "averagePercentage": 0.0, "totalRecords": 0},
        "studentStats": [],
        "subjectAverages": [],
    }


def test_no_tests_in_range_returns_empty_response(world):
    _seed(world)

    result = _build(world, start_date=date(2025, 1, 1))

    assert result["chartData"] == []
    assert result["subjectAverages"] == []
    assert result["stats"]["totalTests"] == 0

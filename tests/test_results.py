import unittest
from datetime import datetime, timezone

from nexusims.core.entities import MarkRecord
from nexusims.core.results import (
    ResultStatistics,
    aggregate,
    build_marksheet,
    chart_data,
    filter_by_exam_type,
    is_pass,
    passing_marks,
    performance_trend,
)


def _mark(marks, total, exam_type="End-Term", code="CS101", name="Data Structures", credits=3, recorded_at=None):
    return MarkRecord(
        student_id="s1",
        course_id=code.lower(),
        course_name=name,
        course_code=code,
        exam_type=exam_type,
        marks_obtained=marks,
        max_marks=total,
        credits=credits,
        recorded_at=recorded_at,
    )


class AggregateTests(unittest.TestCase):
    def test_empty_input(self):
        stats = aggregate([])
        self.assertEqual(stats, ResultStatistics())
        self.assertEqual(stats.cgpa, 0)
        self.assertEqual(stats.overall_percentage, 0)
        self.assertEqual(stats.total_exams, 0)
        self.assertIsNone(stats.highest_score)
        self.assertIsNone(stats.lowest_score)
        self.assertEqual(stats.average_marks, 0)

    def test_pass_fail_and_extremes(self):
        records = [_mark(90, 100), _mark(30, 100)]
        stats = aggregate(records)
        self.assertAlmostEqual(stats.overall_percentage, 60.0, places=2)
        self.assertAlmostEqual(stats.cgpa, 6.0, places=2)
        self.assertEqual(stats.total_exams, 2)
        self.assertEqual(stats.pass_count, 1)
        self.assertEqual(stats.fail_count, 1)
        self.assertEqual(stats.highest_score.marks_obtained, 90)
        self.assertEqual(stats.lowest_score.marks_obtained, 30)
        self.assertAlmostEqual(stats.average_marks, 60.0, places=2)

    def test_overall_percentage_weights_by_max_marks(self):
        stats = aggregate([_mark(10, 20, exam_type="Quiz"), _mark(90, 100)])
        self.assertAlmostEqual(stats.overall_percentage, 100 / 120 * 100)
        # raw mean, not normalised
        self.assertAlmostEqual(stats.average_marks, 50.0)

    def test_pass_threshold_is_forty_percent(self):
        self.assertTrue(is_pass(_mark(40, 100)))
        self.assertFalse(is_pass(_mark(39.9, 100)))
        # passing here does not need a passing letter grade
        self.assertTrue(is_pass(_mark(45, 100)))

    def test_ties_keep_first_record_as_highest(self):
        first = _mark(8, 10, code="A1")
        second = _mark(80, 100, code="B1")
        stats = aggregate([first, second])
        self.assertIs(stats.highest_score, first)
        self.assertIs(stats.lowest_score, second)

    def test_filter_by_exam_type(self):
        records = [
            _mark(18, 20, exam_type="Quiz"),
            _mark(4, 20, exam_type="Quiz"),
            _mark(35, 100, exam_type="Mid-Term"),
        ]
        quiz = aggregate(records, exam_type="Quiz")
        everything = aggregate(records, exam_type="all")
        self.assertEqual(quiz.total_exams, 2)
        self.assertAlmostEqual(quiz.overall_percentage, 55.0)
        self.assertEqual(everything.total_exams, 3)
        self.assertNotEqual(quiz, everything)
        self.assertEqual(filter_by_exam_type(records, None), records)
        self.assertEqual(aggregate(records, exam_type="Assignment"), ResultStatistics())

    def test_marks_above_max_are_not_clamped(self):
        over = _mark(120, 100, code="OV1")
        stats = aggregate([over, _mark(50, 100)])
        self.assertAlmostEqual(stats.overall_percentage, 85.0)
        self.assertEqual(stats.pass_count, 2)
        self.assertEqual(stats.fail_count, 0)
        self.assertIs(stats.highest_score, over)
        self.assertAlmostEqual(stats.cgpa, 8.5)

    def test_zero_max_marks_does_not_raise(self):
        stats = aggregate([_mark(5, 0)])
        self.assertEqual(stats.overall_percentage, 0)
        self.assertEqual(stats.fail_count, 1)

    def test_display_rounds_values(self):
        display = aggregate([_mark(2, 3), _mark(1, 3)]).to_display()
        self.assertEqual(display["overall_percentage"], 50.0)
        self.assertEqual(display["cgpa"], 5.0)
        self.assertEqual(display["pass_rate"], 50)
        self.assertEqual(display["highest_score"]["grade"], "C")


class ChartDataTests(unittest.TestCase):
    def test_distributions(self):
        records = [
            _mark(95, 100, exam_type="Quiz"),
            _mark(55, 100, exam_type="Mid-Term", code="", name="Operating Systems"),
            _mark(92, 100, exam_type="Quiz"),
        ]
        charts = chart_data(records)
        self.assertEqual(
            charts["exam_type_data"],
            [{"name": "Quiz", "value": 2}, {"name": "Mid-Term", "value": 1}],
        )
        self.assertEqual(
            charts["grade_data"],
            [{"name": "A+", "value": 2}, {"name": "D", "value": 1}],
        )
        self.assertEqual(charts["subject_data"][1]["subject"], "Operating ")
        self.assertEqual(charts["subject_data"][0]["percentage"], 95.0)

    def test_trend_is_chronological_and_skips_undated(self):
        records = [
            _mark(50, 100, code="B", recorded_at=datetime(2024, 3, 9, tzinfo=timezone.utc)),
            _mark(70, 100, code="U"),
            _mark(60, 100, code="A", recorded_at=datetime(2024, 1, 5, tzinfo=timezone.utc)),
        ]
        trend = performance_trend(records)
        self.assertEqual([point["subject"] for point in trend], ["A", "B"])
        self.assertEqual(trend[0]["date"], "Jan 5")
        self.assertEqual(trend[0]["percentage"], 60.0)


class MarksheetTests(unittest.TestCase):
    def test_passing_marks_rounds_up(self):
        self.assertEqual(passing_marks(30), 12)
        self.assertEqual(passing_marks(25), 10)
        self.assertEqual(passing_marks(33), 14)

    def test_marksheet_totals(self):
        sheet = build_marksheet([_mark(95, 100, credits=4), _mark(55, 100, credits=2)])
        self.assertEqual(sheet["total_marks_obtained"], 150)
        self.assertEqual(sheet["total_max_marks"], 200)
        self.assertEqual(sheet["total_passing_marks"], 80)
        self.assertEqual(sheet["overall_percentage"], 75.0)
        self.assertEqual(sheet["overall_grade"], "B")
        self.assertEqual(sheet["sgpa"], 8.67)
        self.assertEqual([row["grade"] for row in sheet["rows"]], ["A+", "D"])
        self.assertEqual(sheet["rows"][0]["passing_marks"], 40)

    def test_empty_marksheet(self):
        sheet = build_marksheet([])
        self.assertEqual(sheet["rows"], [])
        self.assertEqual(sheet["overall_percentage"], 0)
        self.assertEqual(sheet["overall_grade"], "F")
        self.assertEqual(sheet["sgpa"], 0.0)


if __name__ == "__main__":
    unittest.main()

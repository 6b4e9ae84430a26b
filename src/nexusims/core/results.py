from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from nexusims.core.entities import MarkRecord
from nexusims.core.gpa import calculate_sgpa, decile_cgpa
from nexusims.core.grades import letter_grade, percentage_of

# Hard pass/fail rule. Independent of the letter grade bands.
PASS_PERCENTAGE = 40

ALL_EXAM_TYPES = "all"


@dataclass(frozen=True)
class ResultStatistics:
    cgpa: float = 0.0
    overall_percentage: float = 0.0
    total_exams: int = 0
    pass_count: int = 0
    fail_count: int = 0
    highest_score: Optional[MarkRecord] = None
    lowest_score: Optional[MarkRecord] = None
    average_marks: float = 0.0

    @property
    def pass_rate(self) -> float:
        if self.total_exams == 0:
            return 0.0
        return (self.pass_count / self.total_exams) * 100

    def to_display(self) -> Dict[str, Any]:
        return {
            "cgpa": round(self.cgpa, 2),
            "overall_percentage": round(self.overall_percentage, 2),
            "total_exams": self.total_exams,
            "pass_count": self.pass_count,
            "fail_count": self.fail_count,
            "pass_rate": round(self.pass_rate),
            "highest_score": _score_summary(self.highest_score),
            "lowest_score": _score_summary(self.lowest_score),
            "average_marks": round(self.average_marks, 2),
        }


def _score_summary(record: Optional[MarkRecord]) -> Optional[Dict[str, Any]]:
    if record is None:
        return None
    return {
        "course_name": record.course_name,
        "course_code": record.course_code,
        "exam_type": record.exam_type,
        "marks": record.marks_obtained,
        "total": record.max_marks,
        "grade": letter_grade(record.marks_obtained, record.max_marks),
    }


def is_pass(record: MarkRecord) -> bool:
    return record.percentage >= PASS_PERCENTAGE


def filter_by_exam_type(records: Iterable[MarkRecord], exam_type: Optional[str] = ALL_EXAM_TYPES) -> List[MarkRecord]:
    if not exam_type or exam_type == ALL_EXAM_TYPES:
        return list(records)
    return [r for r in records if r.exam_type == exam_type]


def aggregate(records: Iterable[MarkRecord], exam_type: Optional[str] = ALL_EXAM_TYPES) -> ResultStatistics:
    """
    Statistics over one student's mark records, after filtering by exam type.

    overall_percentage is Σmarks / Σmax; average_marks is the plain mean of
    raw marks and is not normalised by max marks.
    """
    selected = filter_by_exam_type(records, exam_type)
    if not selected:
        return ResultStatistics()

    total_obtained = sum(r.marks_obtained for r in selected)
    total_max = sum(r.max_marks for r in selected)
    overall = percentage_of(total_obtained, total_max)

    pass_count = sum(1 for r in selected if is_pass(r))

    # sorted() is stable, so equal ratios keep input order
    ranked = sorted(selected, key=lambda r: r.ratio, reverse=True)

    return ResultStatistics(
        cgpa=decile_cgpa(overall),
        overall_percentage=overall,
        total_exams=len(selected),
        pass_count=pass_count,
        fail_count=len(selected) - pass_count,
        highest_score=ranked[0],
        lowest_score=ranked[-1],
        average_marks=total_obtained / len(selected),
    )


def subject_breakdown(records: Iterable[MarkRecord]) -> List[Dict[str, Any]]:
    return [
        {
            "subject": r.subject_label,
            "percentage": round(r.percentage, 1),
            "marks": r.marks_obtained,
            "total": r.max_marks,
        }
        for r in records
    ]


def _counts(labels: Iterable[str]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def exam_type_distribution(records: Iterable[MarkRecord]) -> List[Dict[str, Any]]:
    return _counts(r.exam_type for r in records)


def grade_distribution(records: Iterable[MarkRecord]) -> List[Dict[str, Any]]:
    return _counts(letter_grade(r.marks_obtained, r.max_marks) for r in records)


def performance_trend(records: Iterable[MarkRecord]) -> List[Dict[str, Any]]:
    dated = sorted((r for r in records if r.recorded_at is not None), key=lambda r: r.recorded_at.timestamp())
    return [
        {
            "date": f"{r.recorded_at.strftime('%b')} {r.recorded_at.day}",
            "percentage": round(r.percentage, 1),
            "subject": r.course_code,
        }
        for r in dated
    ]


def chart_data(records: Iterable[MarkRecord]) -> Dict[str, List[Dict[str, Any]]]:
    records = list(records)
    return {
        "subject_data": subject_breakdown(records),
        "exam_type_data": exam_type_distribution(records),
        "grade_data": grade_distribution(records),
        "trend_data": performance_trend(records),
    }


def passing_marks(max_marks: float) -> int:
    return math.ceil(max_marks * PASS_PERCENTAGE / 100)


def build_marksheet(records: Iterable[MarkRecord]) -> Dict[str, Any]:
    records = list(records)
    rows = [
        {
            "course_code": r.course_code,
            "course_name": r.course_name,
            "exam_type": r.exam_type,
            "credits": r.credits,
            "max_marks": r.max_marks,
            "passing_marks": passing_marks(r.max_marks),
            "marks_obtained": r.marks_obtained,
            "grade": letter_grade(r.marks_obtained, r.max_marks),
        }
        for r in records
    ]

    total_obtained = sum(r.marks_obtained for r in records)
    total_max = sum(r.max_marks for r in records)

    return {
        "rows": rows,
        "total_marks_obtained": total_obtained,
        "total_max_marks": total_max,
        "total_passing_marks": passing_marks(total_max),
        "overall_percentage": round(percentage_of(total_obtained, total_max), 2),
        "overall_grade": letter_grade(total_obtained, total_max),
        "sgpa": calculate_sgpa(records),
    }

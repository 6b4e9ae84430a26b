from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class GradeResult:
    letter: str
    grade_point: int


# (min_percentage, letter, grade_point), highest band first
GRADE_SCALE: Tuple[Tuple[float, str, int], ...] = (
    (90, "A+", 10),
    (80, "A", 9),
    (70, "B", 8),
    (60, "C", 7),
    (50, "D", 6),
)

FAIL_GRADE = GradeResult("F", 0)


def percentage_of(marks: float, total: Optional[float]) -> float:
    if not total:
        return 0.0
    return (marks / total) * 100


def grade_from_percentage(percentage: float) -> GradeResult:
    for lower_bound, letter, point in GRADE_SCALE:
        if percentage >= lower_bound:
            return GradeResult(letter, point)
    return FAIL_GRADE


def grade(marks_obtained: float, max_marks: Optional[float]) -> GradeResult:
    """
    Letter grade and 10-point grade point for a raw score.
    A missing or zero max_marks yields F rather than dividing by zero.
    """
    if not max_marks:
        return FAIL_GRADE
    return grade_from_percentage(percentage_of(marks_obtained, max_marks))


def letter_grade(marks_obtained: float, max_marks: Optional[float]) -> str:
    return grade(marks_obtained, max_marks).letter


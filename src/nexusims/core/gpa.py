from typing import Iterable, Tuple

from nexusims.core.entities import DEFAULT_CREDITS, MarkRecord
from nexusims.core.grades import grade


def weighted_grade_points(records: Iterable[MarkRecord]) -> Iterable[Tuple[int, int]]:
    for record in records:
        credits = record.credits if record.credits and record.credits > 0 else DEFAULT_CREDITS
        yield credits, grade(record.marks_obtained, record.max_marks).grade_point


def calculate_sgpa(records: Iterable[MarkRecord], *, round_to: int = 2) -> float:
    """
    SGPA = Σ(credits * grade_point) / Σ(credits)
    Missing or non-positive credits fall back to DEFAULT_CREDITS; zero total credits gives 0.
    """
    weighted_sum = 0.0
    total_credits = 0

    for credits, grade_point in weighted_grade_points(records):
        weighted_sum += credits * grade_point
        total_credits += credits

    if total_credits == 0:
        return 0.0

    return round(weighted_sum / total_credits, round_to)


def decile_cgpa(overall_percentage: float) -> float:
    return overall_percentage / 10

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from nexusims.core.grades import percentage_of

DEFAULT_CREDITS = 3

EXAM_TYPES: tuple[str, ...] = ("Mid-Term", "End-Term", "Quiz", "Assignment")


@dataclass(frozen=True)
class MarkRecord:
    student_id: str
    course_id: str
    course_name: str
    course_code: str
    exam_type: str
    marks_obtained: float
    max_marks: float
    credits: int = DEFAULT_CREDITS
    recorded_at: datetime | None = None

    @property
    def percentage(self) -> float:
        return percentage_of(self.marks_obtained, self.max_marks)

    @property
    def ratio(self) -> float:
        if not self.max_marks:
            return 0.0
        return self.marks_obtained / self.max_marks

    @property
    def subject_label(self) -> str:
        return self.course_code or self.course_name[:10]


@dataclass(frozen=True)
class AttendanceSummary:
    course_id: str
    course_name: str
    course_code: str
    total_sessions: int
    attended_sessions: int

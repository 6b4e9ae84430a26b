from __future__ import annotations

from typing import Any, Dict, Iterable, List

from nexusims.core.entities import AttendanceSummary

AT_RISK_PERCENTAGE = 75
WARNING_PERCENTAGE = 60


def percentage(attended: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return round((attended / total) * 100, 1)


def overall(summaries: Iterable[AttendanceSummary]) -> float:
    total_attended = 0
    total_classes = 0
    for summary in summaries:
        total_attended += summary.attended_sessions
        total_classes += summary.total_sessions
    return percentage(total_attended, total_classes)


def is_at_risk(pct: float) -> bool:
    return pct < AT_RISK_PERCENTAGE


def attendance_status(pct: float) -> str:
    if pct >= AT_RISK_PERCENTAGE:
        return "good"
    if pct >= WARNING_PERCENTAGE:
        return "warning"
    return "critical"


def at_risk_courses(summaries: Iterable[AttendanceSummary]) -> List[str]:
    return [
        s.course_name
        for s in summaries
        if is_at_risk(percentage(s.attended_sessions, s.total_sessions))
    ]


def attendance_report(summaries: Iterable[AttendanceSummary]) -> Dict[str, Any]:
    summaries = list(summaries)

    courses: List[Dict[str, Any]] = []
    for s in summaries:
        pct = percentage(s.attended_sessions, s.total_sessions)
        courses.append(
            {
                "subject": s.course_name,
                "code": s.course_code,
                "attended": s.attended_sessions,
                "total": s.total_sessions,
                "percentage": pct,
                "status": attendance_status(pct),
            }
        )

    return {
        "courses": courses,
        "overall_percentage": overall(summaries),
        "total_attended": sum(s.attended_sessions for s in summaries),
        "total_classes": sum(s.total_sessions for s in summaries),
        "at_risk": at_risk_courses(summaries),
    }

from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from requests import RequestException

from nexusims.config.logger import get_logger
from nexusims.config.settings import settings
from nexusims.core.entities import DEFAULT_CREDITS, AttendanceSummary, MarkRecord

logger = get_logger("api")


class NexusApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _ref_id(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("_id") or value.get("id") or "")
    return str(value or "")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value or default)
    except (TypeError, ValueError, OverflowError):
        return default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value or default)
    except (TypeError, ValueError, OverflowError):
        return default


def _credits(value: Any) -> int:
    credits = _to_int(value, DEFAULT_CREDITS)
    return credits if credits > 0 else DEFAULT_CREDITS


def parse_mark(data: Dict[str, Any]) -> MarkRecord:
    course = data.get("course") if isinstance(data.get("course"), dict) else {}
    return MarkRecord(
        student_id=_ref_id(data.get("student")),
        course_id=_ref_id(data.get("course")),
        course_name=str(course.get("name") or ""),
        course_code=str(course.get("code") or ""),
        exam_type=str(data.get("type") or ""),
        marks_obtained=_to_float(data.get("marks")),
        max_marks=_to_float(data.get("total")),
        credits=_credits(course.get("credits")),
        recorded_at=_parse_timestamp(data.get("createdAt")),
    )


def parse_course_attendance(data: Dict[str, Any]) -> AttendanceSummary:
    attendance = data.get("attendance") if isinstance(data.get("attendance"), dict) else {}
    return AttendanceSummary(
        course_id=_ref_id(data),
        course_name=str(data.get("name") or ""),
        course_code=str(data.get("code") or ""),
        total_sessions=_to_int(attendance.get("total")),
        attended_sessions=_to_int(attendance.get("present")),
    )


class NexusApiService:
    MY_MARKS_PATH = "/marks/my"
    STUDENT_MARKS_PATH = "/marks/student/{student_id}"
    COURSE_MARKS_PATH = "/marks/course/{course_id}"
    MY_COURSES_PATH = "/courses/my"

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 15) -> None:
        if not base_url:
            raise NexusApiError("Missing NEXUS_API_URL in environment")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_settings(cls, token: Optional[str] = None) -> "NexusApiService":
        return cls(settings.nexus_api_url, token=token, timeout=settings.nexus_api_timeout)

    def get_my_marks(self) -> List[MarkRecord]:
        return [parse_mark(item) for item in self._get_list(self.MY_MARKS_PATH) if isinstance(item, dict)]

    def get_student_marks(self, student_id: str) -> List[MarkRecord]:
        path = self.STUDENT_MARKS_PATH.format(student_id=student_id)
        return [parse_mark(item) for item in self._get_list(path) if isinstance(item, dict)]

    def get_course_marks(self, course_id: str) -> List[MarkRecord]:
        path = self.COURSE_MARKS_PATH.format(course_id=course_id)
        return [parse_mark(item) for item in self._get_list(path) if isinstance(item, dict)]

    def get_my_courses(self) -> List[AttendanceSummary]:
        return [parse_course_attendance(item) for item in self._get_list(self.MY_COURSES_PATH) if isinstance(item, dict)]

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            res = requests.get(url, headers=self._headers(), timeout=self.timeout)
        except RequestException as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise NexusApiError("API_UNAVAILABLE") from exc
        try:
            data = res.json()
        except ValueError as exc:
            raise NexusApiError("API_UNAVAILABLE", status_code=res.status_code) from exc

        if res.status_code >= 400:
            message = "API_ERROR"
            if isinstance(data, dict):
                message = str(data.get("message") or message)
            logger.warning("GET %s returned %s: %s", url, res.status_code, message)
            raise NexusApiError(message, status_code=res.status_code)

        return data

    def _get_list(self, path: str) -> List[Any]:
        data = self._get(path)
        if not isinstance(data, list):
            logger.warning("GET %s returned %s, expected a list", path, type(data).__name__)
            raise NexusApiError("API_ERROR")
        return data

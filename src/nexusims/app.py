from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from nexusims.config.logger import get_logger
from nexusims.config.settings import settings
from nexusims.core.attendance import attendance_report
from nexusims.core.entities import DEFAULT_CREDITS, EXAM_TYPES, MarkRecord
from nexusims.core.export import ExportError, to_csv
from nexusims.core.gpa import calculate_sgpa
from nexusims.core.results import ALL_EXAM_TYPES, aggregate, build_marksheet, chart_data, filter_by_exam_type
from nexusims.services.api_service import NexusApiError, NexusApiService

logger = get_logger("app")

app = FastAPI(title="Nexus IMS Results API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class MarkPayload(BaseModel):
    course_name: str = ""
    course_code: str = ""
    exam_type: str
    marks: float = Field(ge=0)
    total: float = Field(ge=0)
    credits: Optional[int] = Field(default=None, ge=0)
    created_at: Optional[datetime] = None

    @field_validator("exam_type")
    @classmethod
    def _known_exam_type(cls, value: str) -> str:
        if value not in EXAM_TYPES:
            raise ValueError(f"exam_type must be one of: {', '.join(EXAM_TYPES)}")
        return value


class ComputePayload(BaseModel):
    marks: List[MarkPayload] = Field(default_factory=list)
    exam_type: str = ALL_EXAM_TYPES

    @field_validator("exam_type")
    @classmethod
    def _known_filter(cls, value: str) -> str:
        if value != ALL_EXAM_TYPES and value not in EXAM_TYPES:
            raise ValueError(f"exam_type must be '{ALL_EXAM_TYPES}' or one of: {', '.join(EXAM_TYPES)}")
        return value


def _required_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return authorization.strip()


def _api(authorization: Optional[str]) -> NexusApiService:
    return NexusApiService.from_settings(token=_required_token(authorization))


def _api_http_error(exc: NexusApiError) -> HTTPException:
    code = exc.status_code if exc.status_code and exc.status_code >= 400 else status.HTTP_502_BAD_GATEWAY
    logger.warning("Upstream API error (%s): %s", code, exc)
    return HTTPException(status_code=code, detail=str(exc))


def _results_payload(records: List[MarkRecord], exam_type: str) -> Dict:
    selected = filter_by_exam_type(records, exam_type)
    return {
        "exam_type": exam_type,
        "showing": len(selected),
        "available": len(records),
        "statistics": aggregate(selected).to_display(),
        "sgpa": calculate_sgpa(selected),
        "charts": chart_data(selected),
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/results/my")
def my_results(exam_type: str = ALL_EXAM_TYPES, authorization: Optional[str] = Header(default=None)) -> Dict:
    api = _api(authorization)
    try:
        return _results_payload(api.get_my_marks(), exam_type)
    except NexusApiError as exc:
        raise _api_http_error(exc) from exc


@app.get("/results/my/export")
def export_my_results(exam_type: str = ALL_EXAM_TYPES, authorization: Optional[str] = Header(default=None)) -> Response:
    api = _api(authorization)
    try:
        records = filter_by_exam_type(api.get_my_marks(), exam_type)
        body = to_csv(chart_data(records)["subject_data"])
    except NexusApiError as exc:
        raise _api_http_error(exc) from exc
    except ExportError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="results.csv"'},
    )


@app.get("/results/student/{student_id}")
def student_results(
    student_id: str,
    exam_type: str = ALL_EXAM_TYPES,
    authorization: Optional[str] = Header(default=None),
) -> Dict:
    api = _api(authorization)
    try:
        return _results_payload(api.get_student_marks(student_id), exam_type)
    except NexusApiError as exc:
        raise _api_http_error(exc) from exc


@app.get("/results/student/{student_id}/marksheet")
def student_marksheet(student_id: str, authorization: Optional[str] = Header(default=None)) -> Dict:
    api = _api(authorization)
    try:
        return build_marksheet(api.get_student_marks(student_id))
    except NexusApiError as exc:
        raise _api_http_error(exc) from exc


@app.get("/results/course/{course_id}")
def course_results(
    course_id: str,
    exam_type: str = ALL_EXAM_TYPES,
    authorization: Optional[str] = Header(default=None),
) -> Dict:
    api = _api(authorization)
    try:
        return _results_payload(api.get_course_marks(course_id), exam_type)
    except NexusApiError as exc:
        raise _api_http_error(exc) from exc


@app.post("/results/compute")
def compute_results(payload: ComputePayload) -> Dict:
    records = [
        MarkRecord(
            student_id="",
            course_id="",
            course_name=item.course_name,
            course_code=item.course_code,
            exam_type=item.exam_type,
            marks_obtained=item.marks,
            max_marks=item.total,
            credits=item.credits or DEFAULT_CREDITS,
            recorded_at=item.created_at,
        )
        for item in payload.marks
    ]
    return _results_payload(records, payload.exam_type)


@app.get("/attendance/my")
def my_attendance(authorization: Optional[str] = Header(default=None)) -> Dict:
    api = _api(authorization)
    try:
        return attendance_report(api.get_my_courses())
    except NexusApiError as exc:
        raise _api_http_error(exc) from exc

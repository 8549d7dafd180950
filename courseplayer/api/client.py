"""
CourseApiClient - REST client for the learning platform backend.

Covers the endpoints the course player depends on:
- course details and modules
- enrollment status
- course progress
- quiz by lesson
- lesson accessed / lesson complete / quiz submission
- certificate lookup

Transport failures and HTTP error statuses raise BackendError.
"""

import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError

from courseplayer.config import settings
from courseplayer.errors import BackendError
from courseplayer.schemas import (
    Certificate,
    Course,
    CourseProgress,
    LessonAccessResult,
    Module,
    Quiz,
    QuizSubmissionResult,
)

logger = logging.getLogger(__name__)


class CourseApiClient:
    """Thin wrapper around requests.Session for the course endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        token = token or settings.API_TOKEN
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, allow_404: bool = False, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise BackendError(f"{method} {path} failed: {e}", url=url) from e

        if allow_404 and response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise BackendError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                url=url,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"{method} {path} returned invalid JSON", url=url) from e

    @staticmethod
    def _parse(model, payload: Any, what: str):
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise BackendError(f"Malformed {what} payload: {e.error_count()} error(s)") from e

    @staticmethod
    def _expect_object(data: Any, what: str) -> dict:
        if not isinstance(data, dict):
            raise BackendError(f"Malformed {what} payload: expected an object, got {type(data).__name__}")
        return data

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def fetch_modules(self, course_id: int) -> list[Module]:
        """Modules with lessons; an empty list when the course has no content."""
        data = self._request("GET", f"/api/course-creator/courses/{course_id}/modules") or {}
        raw_modules = (data.get("modules") if isinstance(data, dict) else data) or []
        if not isinstance(raw_modules, list):
            raise BackendError(f"Malformed module payload: expected a list, got {type(raw_modules).__name__}")
        return [self._parse(Module, raw, "module") for raw in raw_modules]

    def fetch_course(self, course_id: int) -> Course:
        data = self._expect_object(
            self._request("GET", f"/api/course-creator/courses/{course_id}") or {}, "course"
        )
        meta = self._expect_object(data.get("course") or data, "course")
        modules = self.fetch_modules(course_id)
        return self._parse(Course, {**meta, "id": course_id, "modules": modules}, "course")

    def fetch_quiz(self, lesson_id: int) -> Optional[Quiz]:
        """Quiz attached to a lesson, or None (most lessons have none)."""
        data = self._request("GET", f"/api/quizzes/lesson/{lesson_id}", allow_404=True)
        if not data:
            return None
        raw = self._expect_object(data, "quiz").get("quiz", data)
        if not raw:
            return None
        raw = self._expect_object(raw, "quiz")
        return self._parse(Quiz, {"lessonId": lesson_id, **raw}, "quiz")

    # -------------------------------------------------------------------------
    # Learner state
    # -------------------------------------------------------------------------

    def fetch_enrollment(self, course_id: int) -> bool:
        data = self._request("GET", f"/api/course-creator/courses/{course_id}/enrollment") or {}
        if isinstance(data, bool):
            return data
        return self._expect_object(data, "enrollment").get("enrolled") is True

    def fetch_progress(self, course_id: int) -> CourseProgress:
        data = self._request("GET", f"/api/courses/{course_id}/progress") or {}
        return self._parse(CourseProgress, data, "progress")

    def fetch_certificate(self, course_id: int) -> Optional[Certificate]:
        data = self._request("GET", f"/api/certificates/course/{course_id}", allow_404=True)
        if not data:
            return None
        cert = self._expect_object(data, "certificate").get("certificate", data)
        if not cert:
            return None
        if not self._expect_object(cert, "certificate").get("id"):
            return None
        return self._parse(Certificate, cert, "certificate")

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def track_lesson_access(self, lesson_id: int) -> LessonAccessResult:
        data = self._request("POST", f"/api/lessons/{lesson_id}/access") or {}
        result = self._parse(LessonAccessResult, data, "lesson access")
        if result.lesson_id is None:
            result.lesson_id = lesson_id
        return result

    def mark_lesson_complete(self, lesson_id: int):
        self._request(
            "POST",
            f"/api/course-creator/lessons/{lesson_id}/complete",
            json={"completed": True},
        )
        logger.debug(f"Lesson {lesson_id} completion persisted")

    def submit_quiz(self, lesson_id: int, answers: dict[str, int], score: float) -> QuizSubmissionResult:
        data = self._request(
            "POST",
            "/api/quizzes/submit",
            json={"lessonId": lesson_id, "answers": answers, "score": score},
        ) or {}
        return self._parse(QuizSubmissionResult, data, "quiz submission")

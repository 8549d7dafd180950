"""
CourseSession - one learner viewing one course.

Wires the backend, the progress ledger, the navigator and the quiz engine
around a single PlayerState. Backend failures never propagate out of the
session: they are logged and collected as ReportedError entries for the UI.
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from courseplayer.config import settings
from courseplayer.errors import (
    BackendError,
    CoursePlayerError,
    ErrorKind,
    LessonLockedError,
    QuizValidationError,
)
from courseplayer.schemas import Certificate, Course, CourseProgress, Lesson, Module, Quiz

from .access import CourseAccessState
from .certification import (
    CertificateState,
    CertificationStatus,
    certificate_kind,
    certificate_state,
    evaluate_progress,
)
from .navigator import Navigator
from .progress import ProgressLedger
from .quiz import QuizAttempt, QuizResult
from .state import PlayerState

logger = logging.getLogger(__name__)


@dataclass
class ReportedError:
    """An error surfaced to the UI instead of raised."""
    kind: ErrorKind
    message: str
    lesson_id: Optional[int] = None


class CourseSession:
    """
    Course player session.

    Usage:
        with CourseSession(CourseApiClient(), course_id=12) as session:
            session.load()
            session.go_next()
    """

    def __init__(
        self,
        backend,
        course_id: int,
        executor: Optional[Executor] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize session.

        Args:
            backend: CourseApiClient or FileBackend
            course_id: Course to view
            executor: Executor for background persistence (default: own thread pool)
            max_workers: Thread pool size when the session creates its own executor
        """
        self.backend = backend
        self.course_id = course_id
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers or settings.MAX_WORKERS,
            thread_name_prefix="courseplayer",
        )
        self.state = PlayerState(course_id=course_id)
        self.course = Course(id=course_id)
        self.certificate: Optional[Certificate] = None
        self._errors: list[ReportedError] = []
        self._errors_lock = threading.Lock()
        self.ledger = ProgressLedger(
            course_id, backend, self.executor, on_error=self.report_error
        )
        self.navigator = self._build_navigator()

    def _build_navigator(self) -> Navigator:
        return Navigator(self.course, self.state, self.ledger, on_select=self._on_lesson_selected)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Wait for in-flight persistence and release the thread pool."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def report_error(self, error: CoursePlayerError):
        with self._errors_lock:
            self._errors.append(ReportedError(
                kind=error.kind,
                message=error.message,
                lesson_id=error.lesson_id,
            ))

    @property
    def errors(self) -> list[ReportedError]:
        with self._errors_lock:
            return list(self._errors)

    def drain_errors(self) -> list[ReportedError]:
        """Return and clear reported errors."""
        with self._errors_lock:
            drained, self._errors = self._errors, []
        return drained

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self):
        """Fetch content and enrollment, then run initial selection."""
        try:
            self.course = self.backend.fetch_course(self.course_id)
        except BackendError as e:
            logger.error(f"Failed to load course {self.course_id}: {e}")
            self.report_error(e)
            self.course = Course(id=self.course_id)
        self.navigator = self._build_navigator()
        logger.info(
            f"Course {self.course_id} loaded: {len(self.course.modules)} modules, "
            f"{self.course.total_lessons} lessons"
        )

        try:
            enrolled = self.backend.fetch_enrollment(self.course_id)
        except BackendError as e:
            logger.warning(f"Enrollment check failed for course {self.course_id}: {e}")
            self.report_error(e)
            enrolled = False
        self.set_enrollment(enrolled)

    def set_enrollment(self, enrolled: Optional[bool]):
        """
        Update enrollment status. None means still loading, which defers
        initial selection until a real value arrives.
        """
        self.state.enrolled = enrolled
        if enrolled is None:
            return
        if enrolled:
            self.ledger.load()
            self._load_certificate()
        last_accessed = self.ledger.get_aggregate().last_accessed_lesson_id if enrolled else None
        self.navigator.select_initial(last_accessed)

    def _load_certificate(self):
        try:
            self.certificate = self.backend.fetch_certificate(self.course_id)
        except BackendError as e:
            logger.warning(f"Certificate lookup failed for course {self.course_id}: {e}")
            self.report_error(e)

    def _on_lesson_selected(self, lesson_id: int):
        try:
            quiz = self.backend.fetch_quiz(lesson_id)
        except BackendError as e:
            e.lesson_id = lesson_id
            logger.warning(f"Quiz lookup failed for lesson {lesson_id}: {e}")
            self.report_error(e)
            quiz = None
        if quiz is not None:
            self.state.quiz = quiz
            self.state.attempt = QuizAttempt(quiz, lesson_id)

        if self.state.enrolled:
            self.ledger.track_access(lesson_id)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def enrolled(self) -> Optional[bool]:
        return self.state.enrolled

    @property
    def is_preview(self) -> bool:
        return self.state.enrolled is False

    @property
    def access_state(self) -> CourseAccessState:
        return self.navigator.access_state

    @property
    def current_module(self) -> Optional[Module]:
        return self.navigator.current_module

    @property
    def current_lesson(self) -> Optional[Lesson]:
        return self.navigator.current_lesson

    @property
    def quiz(self) -> Optional[Quiz]:
        return self.state.quiz

    @property
    def attempt(self) -> Optional[QuizAttempt]:
        return self.state.attempt

    @property
    def aggregate(self) -> CourseProgress:
        return self.ledger.get_aggregate()

    def certification(self) -> CertificationStatus:
        if not self.state.enrolled:
            return CertificationStatus.NOT_ELIGIBLE
        return evaluate_progress(self.aggregate)

    def certificate_state(self) -> CertificateState:
        return certificate_state(self.certification(), self.certificate is not None)

    @property
    def certificate_kind(self) -> str:
        return certificate_kind(self.course)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def select_lesson(self, lesson_id: int) -> Optional[Lesson]:
        """Open a lesson; a locked lesson is reported and leaves the selection unchanged."""
        try:
            return self.navigator.select(lesson_id)
        except LessonLockedError as e:
            logger.info(f"Blocked access to lesson {lesson_id}: {e}")
            self.report_error(e)
            return None

    def go_next(self) -> Optional[Lesson]:
        return self.navigator.go_next()

    def go_previous(self) -> Optional[Lesson]:
        return self.navigator.go_previous()

    def retake_course(self) -> Optional[Lesson]:
        """Route a must-retake learner back into the course."""
        return self.navigator.go_to_retake_entry()

    # -------------------------------------------------------------------------
    # Quiz
    # -------------------------------------------------------------------------

    def _require_attempt(self) -> QuizAttempt:
        if self.state.attempt is None:
            raise QuizValidationError(
                "Current lesson has no quiz", lesson_id=self.state.selected_lesson_id
            )
        return self.state.attempt

    def select_answer(self, question_id: str, option_index: int):
        self._require_attempt().select_answer(question_id, option_index)

    def submit_quiz(self) -> QuizResult:
        """
        Score the current attempt.

        Preview visitors get a local score only; enrolled learners also have
        the score recorded in the ledger and sent to the backend.
        """
        attempt = self._require_attempt()
        result = attempt.submit()
        if self.state.enrolled and attempt.lesson_id is not None:
            self.ledger.record_quiz_score(
                attempt.lesson_id,
                result.score_percent,
                result.passed,
                attempt.selections,
            )
        return result

    def retake_quiz(self):
        self._require_attempt().retake()

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def mark_complete(self, lesson_id: Optional[int] = None) -> Optional[Future]:
        """Mark a lesson (default: the current one) complete. No-op in preview mode."""
        lesson_id = lesson_id if lesson_id is not None else self.state.selected_lesson_id
        if lesson_id is None:
            return None
        if not self.state.enrolled:
            logger.info(f"Preview mode: completion of lesson {lesson_id} not recorded")
            return None
        if self.course.find_lesson(lesson_id) is None:
            raise LessonLockedError(f"Lesson {lesson_id} not found in course", lesson_id=lesson_id)
        return self.ledger.mark_complete(lesson_id)

    def refresh_progress(self) -> Optional[Future]:
        if not self.state.enrolled:
            return None
        return self.ledger.refresh()

"""
ProgressLedger - client-side cache of lesson completion and quiz scores.

Every mutation follows the same sequence:
1. apply an optimistic event locally (readers see it immediately)
2. persist the fact on the backend in a background job
3. fetch a fresh snapshot and apply it; the snapshot replaces local state

All state transitions go through reduce_progress. The most recently
received server snapshot wins, whatever order the requests were issued in.
Failed persistence is reported but does not roll back the optimistic state.
"""

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Callable, Optional, Union

from courseplayer.errors import BackendError, CoursePlayerError
from courseplayer.schemas import CourseProgress, LessonProgress
from courseplayer.utils import mean

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class OptimisticComplete:
    lesson_id: int


@dataclass(frozen=True)
class OptimisticQuizScore:
    lesson_id: int
    score: float
    passed: bool


@dataclass(frozen=True)
class OptimisticLastAccessed:
    lesson_id: int


@dataclass(frozen=True)
class ServerSnapshot:
    progress: CourseProgress


ProgressEvent = Union[OptimisticComplete, OptimisticQuizScore, OptimisticLastAccessed, ServerSnapshot]


def reduce_progress(state: CourseProgress, event: ProgressEvent) -> CourseProgress:
    """Compute the next aggregate from the current one and a single event."""
    if isinstance(event, ServerSnapshot):
        return event.progress

    if isinstance(event, OptimisticComplete):
        if state.is_completed(event.lesson_id):
            return state
        record = state.record_for(event.lesson_id)
        if record:
            record = record.model_copy(update={"completed": True})
        else:
            record = LessonProgress(lesson_id=event.lesson_id, completed=True)
        completed = state.completed_lessons + 1
        if state.total_lessons:
            completed = min(completed, state.total_lessons)
        return state.model_copy(update={
            "completed_lessons": completed,
            "lesson_progress": {**state.lesson_progress, event.lesson_id: record},
        })

    if isinstance(event, OptimisticQuizScore):
        record = state.record_for(event.lesson_id) or LessonProgress(lesson_id=event.lesson_id)
        record = record.model_copy(update={"score": event.score, "quiz_passed": event.passed})
        records = {**state.lesson_progress, event.lesson_id: record}
        scores = [r.score for r in records.values() if r.score is not None]
        return state.model_copy(update={
            "lesson_progress": records,
            "average_score": mean(scores),
        })

    if isinstance(event, OptimisticLastAccessed):
        return state.model_copy(update={"last_accessed_lesson_id": event.lesson_id})

    raise TypeError(f"Unknown progress event: {event!r}")


# -----------------------------------------------------------------------------
# Ledger
# -----------------------------------------------------------------------------

class ProgressLedger:
    """
    Progress cache for one learner in one course.

    Without a backend/executor the ledger is local-only: optimistic events are
    applied and nothing is persisted (mutators return None instead of a Future).
    """

    def __init__(
        self,
        course_id: int,
        backend=None,
        executor: Optional[Executor] = None,
        on_error: Optional[Callable[[CoursePlayerError], None]] = None,
        initial: Optional[CourseProgress] = None,
    ):
        """
        Initialize ledger.

        Args:
            course_id: Course whose progress is tracked
            backend: CourseApiClient or FileBackend used for persistence
            executor: Executor running the persistence jobs
            on_error: Called with each failed backend call
            initial: Starting aggregate (default: empty)
        """
        self.course_id = course_id
        self.backend = backend
        self._executor = executor
        self._on_error = on_error
        self._state = initial or CourseProgress()
        self._lock = threading.Lock()
        self.snapshots_received = 0

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def get_aggregate(self) -> CourseProgress:
        with self._lock:
            return self._state

    @property
    def aggregate(self) -> CourseProgress:
        return self.get_aggregate()

    def is_completed(self, lesson_id: int) -> bool:
        return self.get_aggregate().is_completed(lesson_id)

    def get_lesson_progress(self, lesson_id: int) -> Optional[LessonProgress]:
        return self.get_aggregate().record_for(lesson_id)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def apply(self, event: ProgressEvent) -> CourseProgress:
        """Apply one event under the ledger lock and return the new aggregate."""
        with self._lock:
            self._state = reduce_progress(self._state, event)
            if isinstance(event, ServerSnapshot):
                self.snapshots_received += 1
            return self._state

    def mark_complete(self, lesson_id: int) -> Optional[Future]:
        """Mark a lesson complete. Completing an already-complete lesson does not double-count."""
        self.apply(OptimisticComplete(lesson_id))
        logger.info(f"Lesson {lesson_id} marked complete (optimistic)")
        return self._submit(self._persist_completion, lesson_id)

    def record_quiz_score(
        self,
        lesson_id: int,
        score: float,
        passed: bool,
        answers: Optional[dict[str, int]] = None,
    ) -> Optional[Future]:
        """
        Record a quiz score for a lesson.

        When the backend confirms a pass, the lesson is marked complete.
        """
        self.apply(OptimisticQuizScore(lesson_id, score, passed))
        logger.info(f"Lesson {lesson_id} quiz score {score} recorded (optimistic), passed={passed}")
        return self._submit(self._persist_quiz_score, lesson_id, score, passed, answers or {})

    def track_access(self, lesson_id: int) -> Optional[Future]:
        """Fire-and-forget lesson-accessed notification."""
        return self._submit(self._persist_access, lesson_id)

    def refresh(self) -> Optional[Future]:
        """Fetch a fresh snapshot in the background."""
        return self._submit(self._fetch_snapshot)

    def load(self) -> CourseProgress:
        """Fetch a snapshot synchronously; on failure keep the current state."""
        if self.backend is None:
            return self.get_aggregate()
        self._guarded(self._fetch_snapshot)
        return self.get_aggregate()

    # -------------------------------------------------------------------------
    # Background jobs
    # -------------------------------------------------------------------------

    def _submit(self, fn, *args) -> Optional[Future]:
        if self.backend is None or self._executor is None:
            return None
        return self._executor.submit(self._guarded, fn, *args)

    def _guarded(self, fn, *args):
        try:
            return fn(*args)
        except BackendError as e:
            logger.warning(f"Progress sync failed for course {self.course_id}: {e}")
            if self._on_error:
                self._on_error(e)
            return None

    def _fetch_snapshot(self) -> CourseProgress:
        snapshot = self.backend.fetch_progress(self.course_id)
        self.apply(ServerSnapshot(snapshot))
        logger.debug(
            f"Progress snapshot applied: {snapshot.completed_lessons}/{snapshot.total_lessons}"
        )
        return snapshot

    def _persist_completion(self, lesson_id: int) -> CourseProgress:
        try:
            self.backend.mark_lesson_complete(lesson_id)
        except BackendError as e:
            e.lesson_id = lesson_id
            raise
        return self._fetch_snapshot()

    def _persist_quiz_score(self, lesson_id: int, score: float, passed: bool, answers: dict[str, int]):
        try:
            verdict = self.backend.submit_quiz(lesson_id, answers, score)
        except BackendError as e:
            e.lesson_id = lesson_id
            raise
        confirmed = verdict.passed if verdict.passed is not None else passed
        if not confirmed:
            self._fetch_snapshot()
            return verdict

        # quizzes gate completion; persisted in this job so a shutdown cannot drop it
        self.apply(OptimisticComplete(lesson_id))
        logger.info(f"Lesson {lesson_id} marked complete after passing quiz")
        self._persist_completion(lesson_id)
        return verdict

    def _persist_access(self, lesson_id: int):
        try:
            echo = self.backend.track_lesson_access(lesson_id)
        except BackendError as e:
            e.lesson_id = lesson_id
            raise
        accessed_id = echo.lesson_id if echo.lesson_id is not None else lesson_id
        self.apply(OptimisticLastAccessed(accessed_id))
        return echo

"""
FileBackend - serve a course from a YAML file with in-memory learner state.

Lets the player run without the platform backend (offline demo, tests).
Implements the same methods as CourseApiClient.

File layout:

    course:
      id: 1
      title: Intro to Python
      certificationType: certificate
      enrolled: true
      modules:
        - id: 10
          title: Basics
          orderNum: 1
          lessons:
            - id: 100
              title: Variables
              orderNum: 1
              freePreviewFlag: true
              quiz:
                id: 7
                passingScore: 70
                questions:
                  - question: Which is a string?
                    options: "1, 'a', None"
                    correctAnswer: B
"""

import logging
import threading
from pathlib import Path
from typing import Any, Optional

import yaml

from courseplayer.errors import BackendError
from courseplayer.schemas import (
    Certificate,
    Course,
    CourseProgress,
    LessonAccessResult,
    LessonProgress,
    Quiz,
    QuizSubmissionResult,
)
from courseplayer.utils import mean

logger = logging.getLogger(__name__)


def load_course_file(path: str | Path) -> dict[str, Any]:
    """
    Load a course definition from YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Course file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data.get("course", data)


class FileBackend:
    """In-memory backend over a course definition dict."""

    def __init__(self, course_data: dict[str, Any], enrolled: Optional[bool] = None):
        self.course = Course.model_validate(course_data)
        self.course_id = self.course.id
        self.enrolled = bool(course_data.get("enrolled", True)) if enrolled is None else enrolled
        self._quizzes: dict[int, Quiz] = {}
        for module in course_data.get("modules") or []:
            for lesson in module.get("lessons") or []:
                if lesson.get("quiz"):
                    self._quizzes[lesson["id"]] = Quiz.model_validate(
                        {"lessonId": lesson["id"], **lesson["quiz"]}
                    )
        self._completed: set[int] = set()
        self._scores: dict[int, LessonProgress] = {}
        self._last_accessed: Optional[int] = None
        self._certificate: Optional[Certificate] = None
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str | Path, enrolled: Optional[bool] = None) -> "FileBackend":
        backend = cls(load_course_file(path), enrolled=enrolled)
        logger.info(f"Loaded course {backend.course_id} from {path}")
        return backend

    def _check_course(self, course_id: int):
        if course_id != self.course_id:
            raise BackendError(f"Unknown course {course_id}", status_code=404)

    def _check_lesson(self, lesson_id: int):
        if self.course.find_lesson(lesson_id) is None:
            raise BackendError(f"Unknown lesson {lesson_id}", status_code=404)

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def fetch_course(self, course_id: int) -> Course:
        self._check_course(course_id)
        return self.course

    def fetch_modules(self, course_id: int):
        self._check_course(course_id)
        return list(self.course.modules)

    def fetch_quiz(self, lesson_id: int) -> Optional[Quiz]:
        return self._quizzes.get(lesson_id)

    # -------------------------------------------------------------------------
    # Learner state
    # -------------------------------------------------------------------------

    def fetch_enrollment(self, course_id: int) -> bool:
        self._check_course(course_id)
        return self.enrolled

    def enroll(self):
        self.enrolled = True

    def fetch_progress(self, course_id: int) -> CourseProgress:
        self._check_course(course_id)
        with self._lock:
            records = {}
            for lesson_id in self._completed:
                records[lesson_id] = LessonProgress(lesson_id=lesson_id, completed=True)
            for lesson_id, scored in self._scores.items():
                records[lesson_id] = scored.model_copy(
                    update={"completed": lesson_id in self._completed}
                )
            scores = [r.score for r in self._scores.values() if r.score is not None]
            return CourseProgress(
                completed_lessons=len(self._completed),
                total_lessons=self.course.total_lessons,
                lesson_progress=records,
                average_score=mean(scores),
                last_accessed_lesson_id=self._last_accessed,
            )

    def fetch_certificate(self, course_id: int) -> Optional[Certificate]:
        self._check_course(course_id)
        return self._certificate

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def track_lesson_access(self, lesson_id: int) -> LessonAccessResult:
        self._check_lesson(lesson_id)
        with self._lock:
            self._last_accessed = lesson_id
        return LessonAccessResult(lesson_id=lesson_id)

    def mark_lesson_complete(self, lesson_id: int):
        self._check_lesson(lesson_id)
        with self._lock:
            self._completed.add(lesson_id)

    def submit_quiz(self, lesson_id: int, answers: dict[str, int], score: float) -> QuizSubmissionResult:
        quiz = self._quizzes.get(lesson_id)
        if quiz is None:
            raise BackendError(f"Lesson {lesson_id} has no quiz", status_code=404)
        passed = score >= quiz.passing_score
        with self._lock:
            self._scores[lesson_id] = LessonProgress(
                lesson_id=lesson_id, score=score, quiz_passed=passed
            )
        return QuizSubmissionResult(passed=passed, score=score)

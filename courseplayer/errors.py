"""
Error taxonomy for CoursePlayer.

Every engine error carries an ErrorKind so the UI can decide how to show it:
- validation: malformed quiz data or an out-of-range answer
- incomplete: quiz submitted before every question was answered
- access_denied: lesson not open to the current visitor
- network: a backend call failed
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    INCOMPLETE = "incomplete"
    ACCESS_DENIED = "access_denied"
    NETWORK = "network"


class CoursePlayerError(Exception):
    """Base exception for the engine."""
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, lesson_id: Optional[int] = None):
        self.message = message
        self.lesson_id = lesson_id
        super().__init__(message)


class QuizValidationError(CoursePlayerError, ValueError):
    """Answer index out of range, or quiz has nothing to score."""
    kind = ErrorKind.VALIDATION


class QuizIncompleteError(CoursePlayerError):
    """Submission attempted with unanswered questions."""
    kind = ErrorKind.INCOMPLETE

    def __init__(self, message: str, missing: list[str], lesson_id: Optional[int] = None):
        super().__init__(message, lesson_id)
        self.missing = missing


class QuizSubmittedError(CoursePlayerError):
    """Answer change attempted after submission (call retake first)."""
    kind = ErrorKind.VALIDATION


class LessonLockedError(CoursePlayerError):
    """Lesson is not accessible to the current visitor, or does not exist."""
    kind = ErrorKind.ACCESS_DENIED


class BackendError(CoursePlayerError):
    """A collaborator call failed (transport error or HTTP error status)."""
    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        lesson_id: Optional[int] = None,
    ):
        super().__init__(message, lesson_id)
        self.status_code = status_code
        self.url = url

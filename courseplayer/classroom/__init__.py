"""
CoursePlayer Classroom - Runtime components for progressing through a course.

This module provides:
- Access policy: which lessons a visitor may open
- Navigator: initial selection and next/previous traversal
- QuizAttempt: answering, scoring and retaking quizzes
- ProgressLedger: optimistic progress cache reconciled with the backend
- Certification: certificate eligibility from progress
- CourseSession: everything above wired around one PlayerState
"""

from .access import (
    CourseAccessState,
    is_accessible,
    accessible_lessons,
    has_accessible_lessons,
    course_access_state,
)

from .quiz import (
    QuizAttempt,
    QuizResult,
    score_quiz,
)

from .state import PlayerState

from .progress import (
    ProgressLedger,
    OptimisticComplete,
    OptimisticQuizScore,
    OptimisticLastAccessed,
    ServerSnapshot,
    reduce_progress,
)

from .navigator import (
    Navigator,
    LessonAvailability,
    OutlineLesson,
    ModuleOutline,
)

from .certification import (
    CertificationStatus,
    CertificateState,
    evaluate_certification,
    evaluate_progress,
    certificate_state,
    certificate_kind,
)

from .session import (
    CourseSession,
    ReportedError,
)

__all__ = [
    # Access
    "CourseAccessState",
    "is_accessible",
    "accessible_lessons",
    "has_accessible_lessons",
    "course_access_state",
    # Quiz
    "QuizAttempt",
    "QuizResult",
    "score_quiz",
    # State
    "PlayerState",
    # Progress
    "ProgressLedger",
    "OptimisticComplete",
    "OptimisticQuizScore",
    "OptimisticLastAccessed",
    "ServerSnapshot",
    "reduce_progress",
    # Navigator
    "Navigator",
    "LessonAvailability",
    "OutlineLesson",
    "ModuleOutline",
    # Certification
    "CertificationStatus",
    "CertificateState",
    "evaluate_certification",
    "evaluate_progress",
    "certificate_state",
    "certificate_kind",
    # Session
    "CourseSession",
    "ReportedError",
]

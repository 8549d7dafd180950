"""
PlayerState - the single mutable session struct shared by navigation,
quiz and progress concerns for one course view.
"""

from dataclasses import dataclass
from typing import Optional

from courseplayer.schemas import Quiz

from .quiz import QuizAttempt


@dataclass
class PlayerState:
    """Selection and quiz state for one course-viewing session."""
    course_id: int
    enrolled: Optional[bool] = None         # None while enrollment is loading
    selected_module_id: Optional[int] = None
    selected_lesson_id: Optional[int] = None
    initial_selection_done: bool = False
    quiz: Optional[Quiz] = None             # quiz of the selected lesson, if any
    attempt: Optional[QuizAttempt] = None

    def clear_quiz(self):
        self.quiz = None
        self.attempt = None

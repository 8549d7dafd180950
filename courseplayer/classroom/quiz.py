"""
Quiz engine - answer selection, scoring and retakes.

Provides:
- score_quiz: pure scoring of a selection map against a quiz
- QuizAttempt: one learner's pass through a quiz (answer -> submit -> retake)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from courseplayer.errors import QuizIncompleteError, QuizSubmittedError, QuizValidationError
from courseplayer.schemas import Quiz
from courseplayer.utils import percent

logger = logging.getLogger(__name__)


@dataclass
class QuizResult:
    """Outcome of a scored submission."""
    quiz_id: int
    correct_count: int
    scorable_total: int
    score_percent: int
    passed: bool
    passing_score: int
    unscorable_question_ids: list[str] = field(default_factory=list)

    @property
    def partially_unscorable(self) -> bool:
        return bool(self.unscorable_question_ids)


def score_quiz(quiz: Quiz, selections: dict[str, int]) -> QuizResult:
    """
    Score a selection map.

    Unscorable questions count in neither the numerator nor the denominator.

    Raises:
        QuizValidationError: if the quiz has no scorable question at all
    """
    scorable = quiz.scorable_questions
    if not scorable:
        raise QuizValidationError(
            f"Quiz {quiz.id} has no scorable questions", lesson_id=quiz.lesson_id
        )

    correct = sum(1 for q in scorable if selections.get(q.id) == q.correct_index)
    score = percent(correct, len(scorable))
    return QuizResult(
        quiz_id=quiz.id,
        correct_count=correct,
        scorable_total=len(scorable),
        score_percent=score,
        passed=score >= quiz.passing_score,
        passing_score=quiz.passing_score,
        unscorable_question_ids=[q.id for q in quiz.unscorable_questions],
    )


class QuizAttempt:
    """
    A learner's attempt at one quiz.

    Selections are writable until submit(); after that they are read-only
    until retake() returns the attempt to the answerable state.
    """

    def __init__(self, quiz: Quiz, lesson_id: Optional[int] = None):
        self.quiz = quiz
        self.lesson_id = lesson_id if lesson_id is not None else quiz.lesson_id
        self._selections: dict[str, int] = {}
        self.result: Optional[QuizResult] = None
        self.attempt_number = 1

    @property
    def is_submitted(self) -> bool:
        return self.result is not None

    @property
    def selections(self) -> dict[str, int]:
        return dict(self._selections)

    @property
    def answered_count(self) -> int:
        return len(self._selections)

    @property
    def missing_question_ids(self) -> list[str]:
        """Scorable questions still without a selection."""
        return [q.id for q in self.quiz.scorable_questions if q.id not in self._selections]

    @property
    def is_complete(self) -> bool:
        return not self.missing_question_ids

    def selection_for(self, question_id: str) -> Optional[int]:
        return self._selections.get(question_id)

    def select_answer(self, question_id: str, option_index: int):
        """
        Record the selected option for a question.

        Selecting the current option again is a no-op; a different option
        replaces the previous one.
        """
        if self.is_submitted:
            raise QuizSubmittedError(
                "Quiz already submitted; retake it to change answers", lesson_id=self.lesson_id
            )

        question = self.quiz.get_question(question_id)
        if question is None:
            raise QuizValidationError(f"Unknown question: {question_id}", lesson_id=self.lesson_id)
        if isinstance(option_index, bool) or not 0 <= option_index < len(question.options):
            raise QuizValidationError(
                f"Option {option_index} out of range for {question_id} "
                f"({len(question.options)} options)",
                lesson_id=self.lesson_id,
            )

        self._selections[question_id] = option_index

    def submit(self) -> QuizResult:
        """
        Score the attempt and freeze the selections.

        Raises:
            QuizSubmittedError: if already submitted
            QuizValidationError: if nothing in the quiz can be scored
            QuizIncompleteError: if a scorable question is unanswered
        """
        if self.is_submitted:
            raise QuizSubmittedError("Quiz already submitted", lesson_id=self.lesson_id)
        if not self.quiz.scorable_questions:
            raise QuizValidationError(
                f"Quiz {self.quiz.id} has no scorable questions", lesson_id=self.lesson_id
            )

        missing = self.missing_question_ids
        if missing:
            raise QuizIncompleteError(
                f"{len(missing)} question(s) unanswered", missing=missing, lesson_id=self.lesson_id
            )

        self.result = score_quiz(self.quiz, self._selections)
        logger.info(
            f"Quiz {self.quiz.id} scored {self.result.score_percent}% "
            f"({self.result.correct_count}/{self.result.scorable_total}), "
            f"passed={self.result.passed}"
        )
        if self.result.partially_unscorable:
            logger.warning(
                f"Quiz {self.quiz.id}: {len(self.result.unscorable_question_ids)} "
                f"question(s) excluded from scoring"
            )
        return self.result

    def retake(self):
        """Clear selections and the submitted result."""
        self._selections.clear()
        self.result = None
        self.attempt_number += 1

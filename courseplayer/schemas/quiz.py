"""
Quiz schemas for CoursePlayer.

Quiz payloads arrive in several shapes from the backend:
- options as a list, or as one comma-delimited string
- correctAnswer as a zero-based index, a letter ('A', 'B', ...),
  a numeric string, or the text of the correct option

Everything is normalized here, at load time, into QuizQuestion
(options: list[str], correct_index: int) so the quiz engine never
branches on representation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Optional

from courseplayer.config import DEFAULT_PASSING_SCORE


def question_id_for(quiz_id: Any, position: int) -> str:
    """Composite question id; stable even when two prompts share the same text."""
    return f"quiz:{quiz_id}:q:{position}"


def parse_options(raw: Any) -> list[str]:
    """
    Options as a list of strings. A single string is split on commas and trimmed.

    Blank and null entries are dropped, so an empty result means there is
    nothing to choose from.
    """
    if isinstance(raw, str):
        options = [option.strip() for option in raw.split(",")]
    elif isinstance(raw, (list, tuple)):
        options = [str(option).strip() for option in raw if option is not None]
    else:
        return []
    return [option for option in options if option]


def parse_correct_answer(raw: Any, options: list[str]) -> Optional[int]:
    """
    Convert a correct-answer reference to a zero-based index.

    Returns None when the reference cannot be interpreted. The result is not
    range-checked here.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    if isinstance(raw, str):
        value = raw.strip()
        if len(value) == 1 and value.isascii() and value.isalpha():
            return ord(value.upper()) - ord("A")
        if value.lstrip("-").isdigit():
            return int(value)
        if value in options:
            return options.index(value)
    return None


class QuizQuestion(BaseModel):
    """
    A normalized question.

    `problem` is set when the question cannot be scored (no options, or a
    correct answer that is missing or out of range). Such questions are left
    out of both the numerator and the denominator when scoring.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    prompt: str
    options: list[str] = []
    correct_index: Optional[int] = None
    explanation: Optional[str] = None
    problem: Optional[str] = None

    @property
    def scorable(self) -> bool:
        return self.problem is None


def normalize_question(raw: Any, quiz_id: Any, position: int) -> QuizQuestion:
    """Build a QuizQuestion from a raw backend question dict."""
    if not isinstance(raw, dict):
        return QuizQuestion(
            id=question_id_for(quiz_id, position),
            prompt="",
            problem="malformed question entry",
        )

    options = parse_options(raw.get("options"))
    raw_correct = raw.get("correctAnswer", raw.get("correct_answer"))
    correct = parse_correct_answer(raw_correct, options)

    problem = None
    if not options:
        problem = "question has no options"
    elif correct is None:
        problem = f"unrecognized correct answer {raw_correct!r}"
    elif not 0 <= correct < len(options):
        problem = f"correct answer index {correct} out of range for {len(options)} options"

    return QuizQuestion(
        id=question_id_for(quiz_id, position),
        prompt=raw.get("question") or raw.get("prompt") or "",
        options=options,
        correct_index=correct if problem is None else None,
        explanation=raw.get("explanation"),
        problem=problem,
    )


class Quiz(BaseModel):
    """Quiz attached to a single lesson."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    lesson_id: Optional[int] = Field(default=None, alias="lessonId")
    title: str = ""
    description: Optional[str] = None
    passing_score: int = Field(default=DEFAULT_PASSING_SCORE, ge=0, le=100, alias="passingScore")
    questions: list[QuizQuestion] = []

    @model_validator(mode="before")
    @classmethod
    def normalize_questions(cls, data):
        if not isinstance(data, dict):
            return data
        quiz_id = data.get("id")
        raw_questions = data.get("questions")
        if not isinstance(raw_questions, list):
            raw_questions = []
        normalized = []
        for position, raw in enumerate(raw_questions):
            if isinstance(raw, QuizQuestion):
                normalized.append(raw)
            else:
                normalized.append(normalize_question(raw, quiz_id, position))
        return {**data, "questions": normalized}

    @field_validator("passing_score", mode="before")
    @classmethod
    def default_passing_score(cls, v):
        return DEFAULT_PASSING_SCORE if v is None else v

    @property
    def scorable_questions(self) -> list[QuizQuestion]:
        return [q for q in self.questions if q.scorable]

    @property
    def unscorable_questions(self) -> list[QuizQuestion]:
        return [q for q in self.questions if not q.scorable]

    @property
    def partially_unscorable(self) -> bool:
        """True when at least one question is excluded from scoring."""
        return any(not q.scorable for q in self.questions)

    def get_question(self, question_id: str) -> Optional[QuizQuestion]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

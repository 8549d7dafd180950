"""
Progress schemas for CoursePlayer.

Defines Pydantic models for:
- Per-lesson progress records (completion, last quiz score)
- The course progress aggregate held by the client ledger
- Server responses for quiz submission, lesson access and certificates
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import Optional
from datetime import datetime

from courseplayer.utils import percent


class LessonProgress(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    lesson_id: int = Field(..., alias="lessonId")
    completed: bool = False
    score: Optional[float] = None
    quiz_passed: Optional[bool] = Field(default=None, alias="quizPassed")


class CourseProgress(BaseModel):
    """
    Course progress aggregate.

    progress_percentage is always derived from completed_lessons and
    total_lessons. average_score is None when no quiz has been scored, which
    is not the same thing as an average of 0.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    completed_lessons: int = Field(default=0, ge=0, alias="completedLessons")
    total_lessons: int = Field(default=0, ge=0, alias="totalLessons")
    lesson_progress: dict[int, LessonProgress] = Field(default={}, alias="lessonProgress")
    average_score: Optional[float] = Field(default=None, alias="averageScore")
    last_accessed_lesson_id: Optional[int] = Field(default=None, alias="lastAccessedLessonId")

    @field_validator("completed_lessons", "total_lessons", mode="before")
    @classmethod
    def null_count(cls, v):
        return 0 if v is None else v

    @field_validator("lesson_progress", mode="before")
    @classmethod
    def key_records_by_lesson(cls, v):
        # server sends a list of records; the ledger keys them by lesson id
        if v is None:
            return {}
        if isinstance(v, list):
            keyed = {}
            for record in v:
                if not isinstance(record, LessonProgress):
                    record = LessonProgress.model_validate(record)
                keyed[record.lesson_id] = record
            return keyed
        return v

    @computed_field
    @property
    def progress_percentage(self) -> int:
        return percent(self.completed_lessons, self.total_lessons)

    def record_for(self, lesson_id: int) -> Optional[LessonProgress]:
        return self.lesson_progress.get(lesson_id)

    def is_completed(self, lesson_id: int) -> bool:
        record = self.lesson_progress.get(lesson_id)
        return bool(record and record.completed)

    def completed_lesson_ids(self) -> set[int]:
        return {lid for lid, record in self.lesson_progress.items() if record.completed}


class QuizSubmissionResult(BaseModel):
    """Server verdict for a submitted quiz."""
    model_config = ConfigDict(populate_by_name=True)

    passed: Optional[bool] = None
    score: Optional[float] = None


class LessonAccessResult(BaseModel):
    """Echo of a lesson-accessed notification."""
    model_config = ConfigDict(populate_by_name=True)

    lesson_id: Optional[int] = Field(default=None, alias="lessonId")


class Certificate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | str
    course_id: Optional[int] = Field(default=None, alias="courseId")
    issued_at: Optional[datetime] = Field(default=None, alias="issuedAt")

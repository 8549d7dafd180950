"""
Course content schemas for CoursePlayer.

Defines Pydantic models for the read-only course structure:
- Lessons (with free-preview flag)
- Modules (ordered lessons)
- Course (ordered modules)

Backend payloads use camelCase keys; both the alias and the field name are accepted.
Ordering always follows the explicit order number, never the array position.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


def sort_by_order(items: list, container: str) -> list:
    """Sort items by order_num, rejecting duplicate order numbers."""
    seen = set()
    for item in items:
        if item.order_num in seen:
            raise ValueError(f"Duplicate order number {item.order_num} in {container}")
        seen.add(item.order_num)
    return sorted(items, key=lambda item: item.order_num)


class Lesson(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    title: str
    content: Optional[str] = None
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    order_num: int = Field(default=0, alias="orderNum")
    duration_minutes: int = Field(default=0, ge=0, alias="durationMinutes")
    free_preview: bool = Field(default=False, alias="freePreviewFlag")

    # backend sends null for unset columns
    @field_validator("duration_minutes", mode="before")
    @classmethod
    def null_duration(cls, v):
        return 0 if v is None else v

    @field_validator("free_preview", mode="before")
    @classmethod
    def null_preview(cls, v):
        return False if v is None else v


class Module(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    title: str
    description: Optional[str] = None
    order_num: int = Field(default=0, alias="orderNum")
    lessons: list[Lesson] = []

    @field_validator("lessons", mode="before")
    @classmethod
    def null_lessons(cls, v):
        return v or []

    @field_validator("lessons")
    @classmethod
    def lessons_ordered(cls, v):
        return sort_by_order(v, "module")

    def get_lesson(self, lesson_id: int) -> Optional[Lesson]:
        for lesson in self.lessons:
            if lesson.id == lesson_id:
                return lesson
        return None


class Course(BaseModel):
    """
    A course as the player sees it.

    `modules` is empty when the backend returned no content; callers render
    a "no content" state in that case.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    title: str = ""
    description: Optional[str] = None
    certification_type: Optional[str] = Field(default=None, alias="certificationType")
    modules: list[Module] = []

    @field_validator("modules", mode="before")
    @classmethod
    def null_modules(cls, v):
        return v or []

    @field_validator("modules")
    @classmethod
    def modules_ordered(cls, v):
        return sort_by_order(v, "course")

    @property
    def total_lessons(self) -> int:
        return sum(len(module.lessons) for module in self.modules)

    @property
    def is_empty(self) -> bool:
        return self.total_lessons == 0

    def all_lessons(self) -> list[Lesson]:
        """All lessons in traversal order."""
        return [lesson for module in self.modules for lesson in module.lessons]

    def get_module(self, module_id: int) -> Optional[Module]:
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

    def find_lesson(self, lesson_id: int) -> Optional[tuple[Module, Lesson]]:
        """Locate a lesson and the module containing it."""
        for module in self.modules:
            lesson = module.get_lesson(lesson_id)
            if lesson:
                return module, lesson
        return None

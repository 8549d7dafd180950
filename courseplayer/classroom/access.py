"""
Access policy - which lessons the current visitor may open.

Pure functions, no I/O. Enrollment status is tri-state: True, False, or
None while it is still loading.
"""

from enum import Enum
from typing import Optional

from courseplayer.schemas import Course, Lesson, Module


class CourseAccessState(str, Enum):
    """Course-level access state for UI display."""
    LOADING = "loading"         # Enrollment status not known yet
    NO_CONTENT = "no_content"   # Course has no lessons at all
    LOCKED = "locked"           # Lessons exist, none accessible
    PREVIEW = "preview"         # Not enrolled, free-preview lessons only
    ENROLLED = "enrolled"       # Everything accessible


def is_accessible(lesson: Lesson, enrolled: Optional[bool]) -> bool:
    """Enrolled visitors see every lesson; everyone else only free previews."""
    if enrolled:
        return True
    return lesson.free_preview


def accessible_lessons(module: Module, enrolled: Optional[bool]) -> list[Lesson]:
    """Accessible lessons of a module, in order."""
    return [lesson for lesson in module.lessons if is_accessible(lesson, enrolled)]


def has_accessible_lessons(course: Course, enrolled: Optional[bool]) -> bool:
    return any(accessible_lessons(module, enrolled) for module in course.modules)


def course_access_state(course: Course, enrolled: Optional[bool]) -> CourseAccessState:
    """
    Classify the course for the current visitor.

    LOCKED and NO_CONTENT are distinct: the first means there is content
    behind enrollment, the second that there is nothing to show.
    """
    if enrolled is None:
        return CourseAccessState.LOADING
    if course.is_empty:
        return CourseAccessState.NO_CONTENT
    if enrolled:
        return CourseAccessState.ENROLLED
    if not has_accessible_lessons(course, enrolled):
        return CourseAccessState.LOCKED
    return CourseAccessState.PREVIEW

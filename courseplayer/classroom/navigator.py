"""
Navigator - Lesson selection and sequential navigation.

Provides:
- Initial selection (resume from last accessed, else first accessible lesson)
- Next/previous accessible lesson across module boundaries
- Course outline with status indicators
- Re-entry point for learners who must retake the course
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from courseplayer.errors import LessonLockedError
from courseplayer.schemas import Course, CourseProgress, Lesson, Module

from .access import CourseAccessState, accessible_lessons, course_access_state, is_accessible
from .progress import ProgressLedger
from .state import PlayerState

logger = logging.getLogger(__name__)


class LessonAvailability(str, Enum):
    """Lesson availability status for UI display."""
    LOCKED = "locked"           # Not open to this visitor
    AVAILABLE = "available"     # Can be opened
    COMPLETED = "completed"     # Finished


@dataclass
class OutlineLesson:
    """Lesson with navigation metadata."""
    lesson: Lesson
    availability: LessonAvailability
    is_current: bool


@dataclass
class ModuleOutline:
    """Module with lessons and navigation metadata."""
    module: Module
    lessons: list[OutlineLesson]
    completed_count: int
    total_count: int


class Navigator:
    """
    Walk a course's accessible lessons in order.

    Reads and writes the selection fields of PlayerState. Traversal never
    wraps around: at either end of the course it is a no-op.
    """

    def __init__(
        self,
        course: Course,
        state: PlayerState,
        ledger: Optional[ProgressLedger] = None,
        on_select: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize navigator.

        Args:
            course: Course content
            state: Session state holding the current selection
            ledger: ProgressLedger for completion status (optional)
            on_select: Called with the lesson id whenever a lesson is selected
        """
        self.course = course
        self.state = state
        self.ledger = ledger
        self.on_select = on_select

    def _accessible(self, module: Module) -> list[Lesson]:
        return accessible_lessons(module, self.state.enrolled)

    def _progress(self) -> CourseProgress:
        return self.ledger.get_aggregate() if self.ledger else CourseProgress()

    def _accessible_sequence(self) -> list[tuple[Module, Lesson]]:
        return [
            (module, lesson)
            for module in self.course.modules
            for lesson in self._accessible(module)
        ]

    @property
    def access_state(self) -> CourseAccessState:
        return course_access_state(self.course, self.state.enrolled)

    @property
    def current_module(self) -> Optional[Module]:
        if self.state.selected_module_id is None:
            return None
        return self.course.get_module(self.state.selected_module_id)

    @property
    def current_lesson(self) -> Optional[Lesson]:
        module = self.current_module
        if module is None or self.state.selected_lesson_id is None:
            return None
        lesson = module.get_lesson(self.state.selected_lesson_id)
        if lesson is None or not is_accessible(lesson, self.state.enrolled):
            return None
        return lesson

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _select(self, module: Module, lesson: Lesson) -> Lesson:
        self.state.selected_module_id = module.id
        self.state.selected_lesson_id = lesson.id
        self.state.clear_quiz()
        logger.debug(f"Selected lesson {lesson.id} in module {module.id}")
        if self.on_select:
            self.on_select(lesson.id)
        return lesson

    def select(self, lesson_id: int) -> Lesson:
        """
        Select a lesson directly (sidebar click).

        Re-selecting the current lesson still resets its quiz attempt.

        Raises:
            LessonLockedError: if the lesson is unknown or not accessible
        """
        found = self.course.find_lesson(lesson_id)
        if not found:
            raise LessonLockedError(f"Lesson {lesson_id} not found in course", lesson_id=lesson_id)
        module, lesson = found
        if not is_accessible(lesson, self.state.enrolled):
            raise LessonLockedError(f"Lesson {lesson_id} is locked", lesson_id=lesson_id)
        return self._select(module, lesson)

    def select_initial(self, last_accessed_lesson_id: Optional[int] = None) -> Optional[Lesson]:
        """
        Pick the lesson to open when the course loads.

        Priority:
        1. Last accessed lesson (enrolled learners only), if still accessible
        2. First accessible lesson of the first module that has one
        3. Nothing (locked or empty course)

        Does nothing while enrollment is unknown, and runs once per load.
        """
        if self.state.enrolled is None:
            logger.debug("Enrollment still loading; deferring initial selection")
            return None
        if self.state.initial_selection_done:
            return self.current_lesson
        self.state.initial_selection_done = True

        if self.state.enrolled and last_accessed_lesson_id is not None:
            found = self.course.find_lesson(last_accessed_lesson_id)
            if found and is_accessible(found[1], self.state.enrolled):
                logger.info(f"Resuming from last accessed lesson {last_accessed_lesson_id}")
                return self._select(*found)

        for module in self.course.modules:
            lessons = self._accessible(module)
            if lessons:
                return self._select(module, lessons[0])

        logger.info(f"No accessible lesson in course {self.course.id} ({self.access_state.value})")
        return None

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def find_next(self) -> Optional[tuple[Module, Lesson]]:
        """Next accessible lesson after the current one, crossing modules."""
        module, lesson = self.current_module, self.current_lesson
        if module is None or lesson is None:
            return None

        lessons = self._accessible(module)
        idx = lessons.index(lesson)
        if idx < len(lessons) - 1:
            return module, lessons[idx + 1]

        module_idx = self.course.modules.index(module)
        for next_module in self.course.modules[module_idx + 1:]:
            next_lessons = self._accessible(next_module)
            if next_lessons:
                return next_module, next_lessons[0]
        return None

    def find_previous(self) -> Optional[tuple[Module, Lesson]]:
        """Previous accessible lesson; crossing back lands on a module's last lesson."""
        module, lesson = self.current_module, self.current_lesson
        if module is None or lesson is None:
            return None

        lessons = self._accessible(module)
        idx = lessons.index(lesson)
        if idx > 0:
            return module, lessons[idx - 1]

        module_idx = self.course.modules.index(module)
        for prev_module in reversed(self.course.modules[:module_idx]):
            prev_lessons = self._accessible(prev_module)
            if prev_lessons:
                return prev_module, prev_lessons[-1]
        return None

    def go_next(self) -> Optional[Lesson]:
        target = self.find_next()
        if target is None:
            return None
        return self._select(*target)

    def go_previous(self) -> Optional[Lesson]:
        target = self.find_previous()
        if target is None:
            return None
        return self._select(*target)

    def is_last_lesson(self) -> bool:
        """Whether the current lesson is the last accessible lesson of the course."""
        sequence = self._accessible_sequence()
        if not sequence or self.state.selected_lesson_id is None:
            return False
        return sequence[-1][1].id == self.state.selected_lesson_id

    def lesson_position(self) -> tuple[int, int]:
        """
        Current lesson position as (current, total) over accessible lessons.

        Returns (0, total) if nothing is selected.
        """
        sequence = self._accessible_sequence()
        for idx, (_, lesson) in enumerate(sequence):
            if lesson.id == self.state.selected_lesson_id:
                return (idx + 1, len(sequence))
        return (0, len(sequence))

    # -------------------------------------------------------------------------
    # Retake
    # -------------------------------------------------------------------------

    def retake_entry(self) -> Optional[tuple[Module, Lesson]]:
        """
        Where a learner who must retake the course should start.

        The first accessible lesson whose recorded quiz failed; otherwise the
        first accessible lesson.
        """
        sequence = self._accessible_sequence()
        if not sequence:
            return None
        progress = self._progress()
        for module, lesson in sequence:
            record = progress.record_for(lesson.id)
            if record and record.quiz_passed is False:
                return module, lesson
        return sequence[0]

    def go_to_retake_entry(self) -> Optional[Lesson]:
        target = self.retake_entry()
        if target is None:
            return None
        return self._select(*target)

    # -------------------------------------------------------------------------
    # Outline
    # -------------------------------------------------------------------------

    def get_lesson_availability(self, lesson: Lesson) -> LessonAvailability:
        if not is_accessible(lesson, self.state.enrolled):
            return LessonAvailability.LOCKED
        if self._progress().is_completed(lesson.id):
            return LessonAvailability.COMPLETED
        return LessonAvailability.AVAILABLE

    def outline(self) -> list[ModuleOutline]:
        """Full course tree annotated with availability and the current marker."""
        result = []
        for module in self.course.modules:
            lessons = []
            completed_count = 0
            for lesson in module.lessons:
                availability = self.get_lesson_availability(lesson)
                if availability == LessonAvailability.COMPLETED:
                    completed_count += 1
                lessons.append(OutlineLesson(
                    lesson=lesson,
                    availability=availability,
                    is_current=lesson.id == self.state.selected_lesson_id,
                ))
            result.append(ModuleOutline(
                module=module,
                lessons=lessons,
                completed_count=completed_count,
                total_count=len(module.lessons),
            ))
        return result

    def status_indicator(self, lesson: Lesson) -> str:
        """
        Status indicator for sidebar display.

        Returns:
            → for current
            ✓ for completed
            ○ for available
            ◌ for locked
        """
        availability = self.get_lesson_availability(lesson)
        if lesson.id == self.state.selected_lesson_id and availability != LessonAvailability.LOCKED:
            return "→"
        elif availability == LessonAvailability.COMPLETED:
            return "✓"
        elif availability == LessonAvailability.AVAILABLE:
            return "○"
        else:
            return "◌"

"""
Navigator tests: initial selection, traversal, outline and retake entry.
"""

import pytest

from courseplayer.classroom import (
    CourseAccessState,
    LessonAvailability,
    Navigator,
    OptimisticComplete,
    OptimisticQuizScore,
    PlayerState,
    ProgressLedger,
)
from courseplayer.errors import ErrorKind, LessonLockedError
from courseplayer.schemas import Course


def make_navigator(course, enrolled, ledger=None, on_select=None) -> Navigator:
    state = PlayerState(course_id=course.id, enrolled=enrolled)
    return Navigator(course, state, ledger, on_select=on_select)


def selection(nav: Navigator) -> tuple:
    return (nav.state.selected_module_id, nav.state.selected_lesson_id)


class TestInitialSelection:

    def test_visitor_starts_at_first_free_preview(self, course):
        nav = make_navigator(course, enrolled=False)
        lesson = nav.select_initial()
        assert lesson.id == 2
        assert selection(nav) == (10, 2)

    def test_enrolled_starts_at_first_lesson(self, course):
        nav = make_navigator(course, enrolled=True)
        assert nav.select_initial().id == 1

    def test_enrolled_resumes_last_accessed(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select_initial(last_accessed_lesson_id=3)
        assert selection(nav) == (20, 3)

    def test_resume_ignored_for_visitor(self, course):
        nav = make_navigator(course, enrolled=False)
        nav.select_initial(last_accessed_lesson_id=4)
        assert selection(nav) == (10, 2)

    def test_resume_to_missing_lesson_falls_back(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select_initial(last_accessed_lesson_id=999)
        assert selection(nav) == (10, 1)

    def test_deferred_while_enrollment_loading(self, course):
        calls = []
        nav = make_navigator(course, enrolled=None, on_select=calls.append)
        assert nav.select_initial() is None
        assert selection(nav) == (None, None)
        assert not nav.state.initial_selection_done
        assert calls == []

        nav.state.enrolled = False
        nav.select_initial()
        assert selection(nav) == (10, 2)
        assert calls == [2]

    def test_runs_once(self, course):
        calls = []
        nav = make_navigator(course, enrolled=True, on_select=calls.append)
        nav.select_initial()
        nav.go_next()
        nav.select_initial(last_accessed_lesson_id=4)
        assert selection(nav) == (10, 2)
        assert calls == [1, 2]

    def test_locked_course_selects_nothing(self):
        course = Course.model_validate({
            "id": 1,
            "modules": [{"id": 1, "title": "M", "lessons": [{"id": 1, "title": "A"}]}],
        })
        nav = make_navigator(course, enrolled=False)
        assert nav.select_initial() is None
        assert nav.access_state == CourseAccessState.LOCKED
        assert nav.current_lesson is None

    def test_empty_course_selects_nothing(self):
        nav = make_navigator(Course(id=1), enrolled=True)
        assert nav.select_initial() is None
        assert nav.access_state == CourseAccessState.NO_CONTENT


class TestTraversal:

    def test_visitor_walk_crosses_modules(self, course):
        nav = make_navigator(course, enrolled=False)
        nav.select_initial()
        assert selection(nav) == (10, 2)

        nav.go_next()
        assert selection(nav) == (20, 3)
        nav.go_next()
        assert selection(nav) == (20, 4)

    def test_next_at_end_is_noop(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select(4)
        assert nav.find_next() is None
        assert nav.go_next() is None
        assert selection(nav) == (20, 4)

    def test_previous_at_start_is_noop(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select(1)
        assert nav.go_previous() is None
        assert selection(nav) == (10, 1)

    def test_previous_skips_locked_lessons(self, course):
        nav = make_navigator(course, enrolled=False)
        nav.select(2)
        assert nav.go_previous() is None
        assert selection(nav) == (10, 2)

    def test_previous_crossing_back_lands_on_last_lesson(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select(3)
        nav.go_previous()
        assert selection(nav) == (10, 2)

    def test_traversal_without_selection(self, course):
        nav = make_navigator(course, enrolled=True)
        assert nav.find_next() is None
        assert nav.find_previous() is None

    def test_skips_module_without_accessible_lessons(self):
        course = Course.model_validate({
            "id": 1,
            "modules": [
                {"id": 1, "title": "A", "orderNum": 1,
                 "lessons": [{"id": 1, "title": "a", "freePreviewFlag": True}]},
                {"id": 2, "title": "B", "orderNum": 2,
                 "lessons": [{"id": 2, "title": "b"}]},
                {"id": 3, "title": "C", "orderNum": 3,
                 "lessons": [{"id": 3, "title": "c", "freePreviewFlag": True}]},
            ],
        })
        nav = make_navigator(course, enrolled=False)
        nav.select_initial()
        nav.go_next()
        assert selection(nav) == (3, 3)
        nav.go_previous()
        assert selection(nav) == (1, 1)

    def test_is_last_lesson(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select(3)
        assert not nav.is_last_lesson()
        nav.select(4)
        assert nav.is_last_lesson()

    def test_lesson_position(self, course):
        nav = make_navigator(course, enrolled=False)
        assert nav.lesson_position() == (0, 3)
        nav.select(3)
        assert nav.lesson_position() == (2, 3)


class TestDirectSelection:

    def test_select_locked_raises(self, course):
        nav = make_navigator(course, enrolled=False)
        nav.select_initial()
        with pytest.raises(LessonLockedError) as exc_info:
            nav.select(1)
        assert exc_info.value.kind == ErrorKind.ACCESS_DENIED
        assert exc_info.value.lesson_id == 1
        assert selection(nav) == (10, 2)

    def test_select_unknown_raises(self, course):
        nav = make_navigator(course, enrolled=True)
        with pytest.raises(LessonLockedError):
            nav.select(999)

    def test_select_resets_quiz(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.state.quiz = object()
        nav.state.attempt = object()
        nav.select(3)
        assert nav.state.quiz is None
        assert nav.state.attempt is None

    def test_on_select_receives_lesson_id(self, course):
        calls = []
        nav = make_navigator(course, enrolled=True, on_select=calls.append)
        nav.select(4)
        nav.go_previous()
        assert calls == [4, 3]

    def test_current_lesson_hidden_when_access_lost(self, course):
        nav = make_navigator(course, enrolled=True)
        nav.select(1)
        nav.state.enrolled = False
        assert nav.current_lesson is None


class TestOutline:

    def test_availability(self, course):
        ledger = ProgressLedger(course.id)
        ledger.apply(OptimisticComplete(2))
        nav = make_navigator(course, enrolled=False, ledger=ledger)
        lesson_one = course.find_lesson(1)[1]
        lesson_two = course.find_lesson(2)[1]
        lesson_three = course.find_lesson(3)[1]
        assert nav.get_lesson_availability(lesson_one) == LessonAvailability.LOCKED
        assert nav.get_lesson_availability(lesson_two) == LessonAvailability.COMPLETED
        assert nav.get_lesson_availability(lesson_three) == LessonAvailability.AVAILABLE

    def test_outline_counts_and_current(self, course):
        ledger = ProgressLedger(course.id)
        ledger.apply(OptimisticComplete(1))
        nav = make_navigator(course, enrolled=True, ledger=ledger)
        nav.select(3)
        outline = nav.outline()
        assert [m.module.id for m in outline] == [10, 20]
        assert outline[0].completed_count == 1
        assert outline[0].total_count == 2
        assert [item.is_current for item in outline[1].lessons] == [True, False]

    def test_status_indicator(self, course):
        ledger = ProgressLedger(course.id)
        ledger.apply(OptimisticComplete(3))
        nav = make_navigator(course, enrolled=False, ledger=ledger)
        nav.select(4)
        lessons = {lesson.id: lesson for lesson in course.all_lessons()}
        assert nav.status_indicator(lessons[1]) == "◌"
        assert nav.status_indicator(lessons[2]) == "○"
        assert nav.status_indicator(lessons[3]) == "✓"
        assert nav.status_indicator(lessons[4]) == "→"


class TestRetakeEntry:

    def test_first_failed_quiz_lesson(self, course):
        ledger = ProgressLedger(course.id)
        ledger.apply(OptimisticQuizScore(3, 40, False))
        ledger.apply(OptimisticQuizScore(2, 100, True))
        nav = make_navigator(course, enrolled=True, ledger=ledger)
        module, lesson = nav.retake_entry()
        assert (module.id, lesson.id) == (20, 3)

    def test_falls_back_to_first_accessible(self, course):
        nav = make_navigator(course, enrolled=True, ledger=ProgressLedger(course.id))
        nav.select(4)
        assert nav.go_to_retake_entry().id == 1
        assert selection(nav) == (10, 1)

    def test_empty_course(self):
        nav = make_navigator(Course(id=1), enrolled=True)
        assert nav.retake_entry() is None
        assert nav.go_to_retake_entry() is None

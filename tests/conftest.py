"""
Shared fixtures for CoursePlayer tests.
"""

import copy
from concurrent.futures import Executor, Future

import pytest

from courseplayer.api import FileBackend
from courseplayer.errors import BackendError
from courseplayer.schemas import Course


# Lesson 2 quiz: five questions, one per correct-answer representation.
# Correct indices: q0=2, q1=0, q2=1, q3=1, q4=2
QUIZ_LESSON_2 = {
    "id": 50,
    "title": "Colours and numbers",
    "passingScore": None,
    "questions": [
        {"question": "Colour of the sky?", "options": "Red, Green, Blue", "correctAnswer": "C"},
        {"question": "Is water wet?", "options": ["Yes", "No"], "correctAnswer": 0},
        {"question": "Smallest even number here?", "options": ["1", "2", "3", "4"], "correctAnswer": "B"},
        {"question": "Second letter?", "options": "Alpha,Beta", "correctAnswer": "Beta"},
        {"question": "Last letter?", "options": ["x", "y", "z"], "correctAnswer": "2"},
    ],
}

# Lesson 3 quiz: one scorable question, one without options
QUIZ_LESSON_3 = {
    "id": 60,
    "title": "Partially broken",
    "passingScore": 80,
    "questions": [
        {"question": "First option?", "options": ["a", "b"], "correctAnswer": "A"},
        {"question": "Nothing to choose", "options": None, "correctAnswer": "A"},
    ],
}

CORRECT_LESSON_2 = {
    "quiz:50:q:0": 2,
    "quiz:50:q:1": 0,
    "quiz:50:q:2": 1,
    "quiz:50:q:3": 1,
    "quiz:50:q:4": 2,
}


def make_course_data(with_quizzes: bool = True) -> dict:
    """
    M1: L1 (locked), L2 (free preview)
    M2: L3 (free preview), L4 (free preview)

    Arrays are deliberately out of order; orderNum defines traversal.
    """
    data = {
        "id": 5,
        "title": "Sample Course",
        "certificationType": "certificate",
        "modules": [
            {
                "id": 20,
                "title": "Module Two",
                "orderNum": 2,
                "lessons": [
                    {"id": 4, "title": "Lesson Four", "orderNum": 2, "freePreviewFlag": True},
                    {"id": 3, "title": "Lesson Three", "orderNum": 1, "freePreviewFlag": True,
                     "quiz": QUIZ_LESSON_3},
                ],
            },
            {
                "id": 10,
                "title": "Module One",
                "orderNum": 1,
                "lessons": [
                    {"id": 1, "title": "Lesson One", "orderNum": 1, "freePreviewFlag": False,
                     "durationMinutes": 12},
                    {"id": 2, "title": "Lesson Two", "orderNum": 2, "freePreviewFlag": True,
                     "quiz": QUIZ_LESSON_2},
                ],
            },
        ],
    }
    data = copy.deepcopy(data)
    if not with_quizzes:
        for module in data["modules"]:
            for lesson in module["lessons"]:
                lesson.pop("quiz", None)
    return data


class ManualExecutor(Executor):
    """Executor that runs submitted jobs only when told to, in any order."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run(self, index: int = 0) -> Future:
        future, fn, args, kwargs = self.pending.pop(index)
        if future.set_running_or_notify_cancel():
            try:
                future.set_result(fn(*args, **kwargs))
            except BaseException as e:
                future.set_exception(e)
        return future

    def run_all(self):
        while self.pending:
            self.run(0)

    def shutdown(self, wait=True, *, cancel_futures=False):
        self.pending.clear()


class FakeBackend(FileBackend):
    """FileBackend with call recording, failure injection and scripted snapshots."""

    def __init__(self, course_data: dict, enrolled: bool = True):
        super().__init__(course_data, enrolled=enrolled)
        self.calls = []
        self.failing = set()
        self.scripted_snapshots = []
        self.verdict_override = None

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failing:
            raise BackendError(f"{name} unavailable", status_code=503)

    def called(self, name) -> list:
        return [call for call in self.calls if call[0] == name]

    def fetch_course(self, course_id):
        self._record("fetch_course", course_id)
        return super().fetch_course(course_id)

    def fetch_enrollment(self, course_id):
        self._record("fetch_enrollment", course_id)
        return super().fetch_enrollment(course_id)

    def fetch_progress(self, course_id):
        self._record("fetch_progress", course_id)
        if self.scripted_snapshots:
            return self.scripted_snapshots.pop(0)
        return super().fetch_progress(course_id)

    def fetch_quiz(self, lesson_id):
        self._record("fetch_quiz", lesson_id)
        return super().fetch_quiz(lesson_id)

    def fetch_certificate(self, course_id):
        self._record("fetch_certificate", course_id)
        return super().fetch_certificate(course_id)

    def track_lesson_access(self, lesson_id):
        self._record("track_lesson_access", lesson_id)
        return super().track_lesson_access(lesson_id)

    def mark_lesson_complete(self, lesson_id):
        self._record("mark_lesson_complete", lesson_id)
        return super().mark_lesson_complete(lesson_id)

    def submit_quiz(self, lesson_id, answers, score):
        self._record("submit_quiz", lesson_id, score)
        result = super().submit_quiz(lesson_id, answers, score)
        if self.verdict_override is not None:
            result.passed = self.verdict_override
        return result


@pytest.fixture
def course_data() -> dict:
    return make_course_data()


@pytest.fixture
def course(course_data) -> Course:
    return Course.model_validate(course_data)


@pytest.fixture
def executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def backend(course_data) -> FakeBackend:
    return FakeBackend(course_data)

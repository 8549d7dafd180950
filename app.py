"""
CoursePlayer - Course player for the learning platform.

Streamlit application for working through a course: lessons, quizzes,
progress and certificates.

Usage:
    streamlit run app.py

Set API_BASE_URL and COURSE_ID to use the platform backend, or COURSE_FILE
to play a course from a YAML file (see data/sample_course.yaml).
"""

import streamlit as st
from pathlib import Path

from courseplayer.api import CourseApiClient, FileBackend
from courseplayer.classroom import (
    CourseAccessState,
    CertificateState,
    CourseSession,
    LessonAvailability,
)
from courseplayer.config import CERTIFICATE_PASSING_SCORE, settings, setup_logging
from courseplayer.errors import CoursePlayerError


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

DEFAULT_COURSE_FILE = Path("data/sample_course.yaml")

setup_logging()

st.set_page_config(
    page_title="CoursePlayer",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def create_session() -> CourseSession:
    """Build a CourseSession from settings."""
    if settings.COURSE_FILE or not settings.COURSE_ID:
        backend = FileBackend.from_file(settings.COURSE_FILE or DEFAULT_COURSE_FILE)
        course_id = settings.COURSE_ID or backend.course_id
    else:
        backend = CourseApiClient()
        course_id = settings.COURSE_ID

    session = CourseSession(backend, course_id)
    session.load()
    return session


def init_session_state():
    """Initialize session state variables."""
    if "course_session" not in st.session_state:
        st.session_state.course_session = create_session()


# -----------------------------------------------------------------------------
# Sidebar: Course Outline
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with course outline and progress."""
    session = st.session_state.course_session
    st.sidebar.title(session.course.title or "Course")

    if session.enrolled:
        progress = session.aggregate
        st.sidebar.markdown(
            f"**Progress:** {progress.completed_lessons}/{progress.total_lessons} lessons "
            f"({progress.progress_percentage}%)"
        )
        st.sidebar.progress(min(progress.progress_percentage, 100) / 100)
        if progress.average_score is not None:
            st.sidebar.markdown(f"**Average quiz score:** {round(progress.average_score)}%")
        if st.sidebar.button("Refresh progress"):
            session.refresh_progress()
            st.rerun()

    st.sidebar.divider()
    st.sidebar.subheader("Course Content")

    nav = session.navigator
    for outline in nav.outline():
        module = outline.module
        expanded = session.current_module is not None and session.current_module.id == module.id
        label = f"**{module.title}** ({outline.completed_count}/{outline.total_count})"
        with st.sidebar.expander(label, expanded=expanded):
            for item in outline.lessons:
                lesson = item.lesson
                indicator = nav.status_indicator(lesson)
                col1, col2 = st.columns([1, 9])
                with col1:
                    st.markdown(indicator)
                with col2:
                    title = lesson.title[:30] + "..." if len(lesson.title) > 30 else lesson.title
                    if st.button(
                        title,
                        key=f"lesson_{lesson.id}",
                        disabled=item.availability == LessonAvailability.LOCKED,
                        use_container_width=True,
                    ):
                        session.select_lesson(lesson.id)
                        st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Lesson View
# -----------------------------------------------------------------------------

def render_errors():
    """Show errors reported since the last rerun."""
    session = st.session_state.course_session
    for error in session.drain_errors():
        st.warning(f"{error.message}")


def render_lesson_view():
    """Render the main lesson content."""
    session = st.session_state.course_session

    if session.is_preview:
        st.info(
            "Free Preview Mode: you're viewing free preview lessons. "
            "Enroll to unlock all content, track progress, and earn certificates."
        )

    access = session.access_state
    if access == CourseAccessState.LOADING:
        st.info("Loading course...")
        return
    if access == CourseAccessState.NO_CONTENT:
        st.info("This course has no content yet.")
        return
    if access == CourseAccessState.LOCKED:
        st.warning("This course is locked. Enroll to access its lessons.")
        return

    lesson = session.current_lesson
    if not lesson:
        st.info("Select a lesson from the sidebar to begin.")
        return

    pos, total = session.navigator.lesson_position()
    st.caption(f"Lesson {pos} of {total} · {lesson.duration_minutes} min")
    st.header(lesson.title)

    if lesson.video_url:
        st.video(lesson.video_url)
    if lesson.content:
        st.markdown(lesson.content)

    render_quiz_section()
    render_navigation_bar()


def render_quiz_section():
    """Render the quiz for the current lesson, if it has one."""
    session = st.session_state.course_session
    attempt = session.attempt
    if attempt is None:
        return

    quiz = attempt.quiz
    st.divider()
    st.subheader(quiz.title or "Quiz")
    if quiz.description:
        st.markdown(quiz.description)
    if quiz.partially_unscorable:
        st.warning("Some questions in this quiz could not be scored and are not counted.")

    for idx, question in enumerate(quiz.questions):
        st.markdown(f"**Question {idx + 1}:** {question.prompt}")
        if not question.options:
            st.caption("This question has no options.")
            continue
        current = attempt.selection_for(question.id)
        choice = st.radio(
            question.prompt,
            options=list(range(len(question.options))),
            format_func=lambda i, q=question: q.options[i],
            index=current,
            key=f"{question.id}_{id(attempt)}_{attempt.attempt_number}",
            disabled=attempt.is_submitted,
            label_visibility="collapsed",
        )
        if choice is not None and choice != current and not attempt.is_submitted:
            session.select_answer(question.id, choice)
        if attempt.is_submitted and question.explanation:
            st.caption(question.explanation)

    if not attempt.is_submitted:
        if st.button("Submit Quiz", disabled=not attempt.is_complete, type="primary"):
            try:
                session.submit_quiz()
            except CoursePlayerError as e:
                st.error(e.message)
            st.rerun()
        return

    result = attempt.result
    if result.passed:
        st.success(f"Passed: {result.score_percent}% ({result.correct_count} of {result.scorable_total} correct)")
    else:
        st.error(
            f"Score: {result.score_percent}% - {result.passing_score}% required to pass "
            f"({result.correct_count} of {result.scorable_total} correct)"
        )
        if st.button("Retake Quiz"):
            session.retake_quiz()
            st.rerun()


def render_navigation_bar():
    """Render previous/next buttons, completion and certificate actions."""
    session = st.session_state.course_session
    lesson = session.current_lesson

    st.divider()
    if session.enrolled and lesson and not session.ledger.is_completed(lesson.id):
        if st.button("Mark lesson as complete", use_container_width=True):
            session.mark_complete(lesson.id)
            st.rerun()
    elif session.enrolled and lesson:
        st.success("Lesson completed!")

    col1, col2 = st.columns(2)
    with col1:
        if session.navigator.find_previous() and st.button("← Previous Lesson", use_container_width=True):
            session.go_previous()
            st.rerun()
    with col2:
        render_course_action()


def render_course_action():
    """Certificate, retake-course or next-lesson action."""
    session = st.session_state.course_session
    kind = session.certificate_kind.capitalize()
    state = session.certificate_state()

    if state == CertificateState.CERTIFIED:
        st.success(f"View Your {kind}")
    elif state == CertificateState.ELIGIBLE:
        st.success(f"You can now claim your {kind}!")
    elif state == CertificateState.MUST_RETAKE:
        st.warning(f"Your average quiz score is below {CERTIFICATE_PASSING_SCORE}%. Retake quizzes to earn your {kind}.")
        if st.button("Retake Course", use_container_width=True):
            session.retake_course()
            st.rerun()
    if not session.navigator.is_last_lesson() and session.navigator.find_next():
        if st.button("Next Lesson →", use_container_width=True):
            session.go_next()
            st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()
    render_errors()
    render_lesson_view()


if __name__ == "__main__":
    main()

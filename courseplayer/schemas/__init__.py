"""
CoursePlayer Schemas - Pydantic models for the course player.

This module exports all schema classes for:
- Content: courses, modules, lessons
- Quiz: quizzes and normalized questions
- Progress: lesson progress records, the course aggregate, server responses
"""

# Content schemas
from .content import (
    Lesson,
    Module,
    Course,
    sort_by_order,
)

# Quiz schemas
from .quiz import (
    QuizQuestion,
    Quiz,
    question_id_for,
    parse_options,
    parse_correct_answer,
    normalize_question,
)

# Progress schemas
from .progress import (
    LessonProgress,
    CourseProgress,
    QuizSubmissionResult,
    LessonAccessResult,
    Certificate,
)

__all__ = [
    # Content
    'Lesson',
    'Module',
    'Course',
    'sort_by_order',
    # Quiz
    'QuizQuestion',
    'Quiz',
    'question_id_for',
    'parse_options',
    'parse_correct_answer',
    'normalize_question',
    # Progress
    'LessonProgress',
    'CourseProgress',
    'QuizSubmissionResult',
    'LessonAccessResult',
    'Certificate',
]

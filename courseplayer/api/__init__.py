"""CoursePlayer backends."""

from .client import CourseApiClient
from .file_backend import FileBackend, load_course_file

__all__ = ["CourseApiClient", "FileBackend", "load_course_file"]

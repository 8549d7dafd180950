"""CoursePlayer utilities."""

from .scoring import percent, mean

__all__ = ["percent", "mean"]

"""
Certification - certificate/diploma eligibility from course progress.
"""

from enum import Enum
from typing import Optional

from courseplayer.config import CERTIFICATE_PASSING_SCORE
from courseplayer.schemas import Course, CourseProgress


class CertificationStatus(str, Enum):
    NOT_ELIGIBLE = "not_eligible"
    ELIGIBLE = "eligible"
    MUST_RETAKE = "must_retake"     # all content covered, average score too low


class CertificateState(str, Enum):
    """What the player shows; an issued certificate takes precedence."""
    CERTIFIED = "certified"
    ELIGIBLE = "eligible"
    MUST_RETAKE = "must_retake"
    NOT_ELIGIBLE = "not_eligible"


def evaluate_certification(
    progress_percentage: float,
    average_score: Optional[float],
    threshold: float = CERTIFICATE_PASSING_SCORE,
) -> CertificationStatus:
    """
    Eligibility rules, in order:
    1. progress below 100% -> not eligible
    2. no quizzes in the course (average is None) -> eligible
    3. average >= threshold -> eligible
    4. otherwise -> must retake
    """
    if progress_percentage < 100:
        return CertificationStatus.NOT_ELIGIBLE
    if average_score is None:
        return CertificationStatus.ELIGIBLE
    if average_score >= threshold:
        return CertificationStatus.ELIGIBLE
    return CertificationStatus.MUST_RETAKE


def evaluate_progress(progress: CourseProgress) -> CertificationStatus:
    return evaluate_certification(progress.progress_percentage, progress.average_score)


def certificate_state(status: CertificationStatus, has_certificate: bool) -> CertificateState:
    if has_certificate:
        return CertificateState.CERTIFIED
    return CertificateState(status.value)


def certificate_kind(course: Course) -> str:
    """'diploma' for diploma courses, 'certificate' otherwise."""
    if (course.certification_type or "").lower() == "diploma":
        return "diploma"
    return "certificate"

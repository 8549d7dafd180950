"""
Certification eligibility tests.
"""

import pytest

from courseplayer.classroom import (
    CertificateState,
    CertificationStatus,
    certificate_kind,
    certificate_state,
    evaluate_certification,
    evaluate_progress,
)
from courseplayer.schemas import Course, CourseProgress


class TestEvaluateCertification:

    def test_complete_without_quizzes_is_eligible(self):
        assert evaluate_certification(100, None) == CertificationStatus.ELIGIBLE

    def test_complete_with_low_average_must_retake(self):
        assert evaluate_certification(100, 65) == CertificationStatus.MUST_RETAKE

    def test_incomplete_is_not_eligible(self):
        assert evaluate_certification(80, 100) == CertificationStatus.NOT_ELIGIBLE
        assert evaluate_certification(80, None) == CertificationStatus.NOT_ELIGIBLE
        assert evaluate_certification(80, 10) == CertificationStatus.NOT_ELIGIBLE

    @pytest.mark.parametrize("average,expected", [
        (70, CertificationStatus.ELIGIBLE),
        (69.9, CertificationStatus.MUST_RETAKE),
        (0, CertificationStatus.MUST_RETAKE),
        (100, CertificationStatus.ELIGIBLE),
    ])
    def test_threshold(self, average, expected):
        assert evaluate_certification(100, average) == expected

    def test_zero_average_is_not_missing_average(self):
        assert evaluate_certification(100, 0) != evaluate_certification(100, None)

    def test_from_progress(self):
        progress = CourseProgress(completed_lessons=4, total_lessons=4, average_score=90)
        assert evaluate_progress(progress) == CertificationStatus.ELIGIBLE
        progress = CourseProgress(completed_lessons=3, total_lessons=4, average_score=90)
        assert evaluate_progress(progress) == CertificationStatus.NOT_ELIGIBLE


class TestCertificateState:

    def test_issued_certificate_takes_precedence(self):
        for status in CertificationStatus:
            assert certificate_state(status, True) == CertificateState.CERTIFIED

    def test_mirrors_status(self):
        assert certificate_state(CertificationStatus.ELIGIBLE, False) == CertificateState.ELIGIBLE
        assert certificate_state(CertificationStatus.MUST_RETAKE, False) == CertificateState.MUST_RETAKE
        assert certificate_state(CertificationStatus.NOT_ELIGIBLE, False) == CertificateState.NOT_ELIGIBLE


class TestCertificateKind:

    def test_diploma(self):
        assert certificate_kind(Course(id=1, certification_type="Diploma")) == "diploma"

    def test_default_certificate(self):
        assert certificate_kind(Course(id=1)) == "certificate"
        assert certificate_kind(Course(id=1, certification_type="certificate")) == "certificate"

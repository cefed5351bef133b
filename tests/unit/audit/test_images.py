"""Tests for the image alt-text audit."""

import pytest
from landingqa.audit.images import ImageAuditor
from landingqa.protocols import Image, ImageStatus, Severity


@pytest.fixture
def auditor():
    return ImageAuditor()


@pytest.mark.unit
class TestClassify:
    def test_tracking_pixel_without_alt_is_low_severity(self, auditor):
        finding = auditor.classify(Image(src="https://track.example.com/tracking-pixel.gif", alt=None))
        assert finding.status is ImageStatus.MISSING
        assert finding.severity is Severity.LOW
        assert finding.decorative

    def test_tracking_pixel_with_empty_alt_is_ok(self, auditor):
        finding = auditor.classify(Image(src="https://track.example.com/tracking-pixel.gif", alt=""))
        assert finding.status is ImageStatus.OK
        assert finding.severity is None

    def test_one_by_one_image_is_decorative(self, auditor):
        assert auditor.is_decorative(Image(src="https://cdn.example.com/a.gif", alt=None, width="1", height="1px"))
        assert not auditor.is_decorative(Image(src="https://cdn.example.com/a.gif", alt=None, width="1", height="20"))

    @pytest.mark.parametrize(
        "src",
        [
            "tracking-pixel.gif",
            "https://cdn.example.com/spacer.gif",
            "https://mail.example.com/track/abc123",
            "https://cdn.example.com/pixel.png?id=9",
        ],
    )
    def test_decorative_sources(self, auditor, src):
        assert auditor.is_decorative(Image(src=src, alt=None))

    @pytest.mark.parametrize(
        "src",
        [
            "https://cdn.example.com/soundtrack-hero.jpg",
            "https://cdn.example.com/pixel-art-banner.png",
            "https://cdn.example.com/racetrack.png",
        ],
    )
    def test_content_images_with_similar_names_are_not_decorative(self, auditor, src):
        finding = auditor.classify(Image(src=src, alt=None))
        assert not finding.decorative
        assert finding.severity is Severity.HIGH

    def test_content_image_without_alt_is_high_severity(self, auditor):
        finding = auditor.classify(Image(src="https://cdn.example.com/hero.jpg", alt=None))
        assert finding.status is ImageStatus.MISSING
        assert finding.severity is Severity.HIGH
        assert not finding.decorative

    def test_content_image_with_empty_alt(self, auditor):
        finding = auditor.classify(Image(src="https://cdn.example.com/hero.jpg", alt="  "))
        assert finding.status is ImageStatus.EMPTY
        assert finding.severity is Severity.MEDIUM

    @pytest.mark.parametrize("alt", ["image", "Image 1", "IMG_1234.jpg", "photo of", "logo", "hero.png"])
    def test_placeholder_alt_is_generic(self, auditor, alt):
        finding = auditor.classify(Image(src="https://cdn.example.com/hero.jpg", alt=alt))
        assert finding.status is ImageStatus.GENERIC
        assert finding.severity is Severity.MEDIUM

    def test_meaningful_alt_is_ok(self, auditor):
        finding = auditor.classify(Image(src="https://cdn.example.com/hero.jpg", alt="Spring flowers on a table"))
        assert finding.status is ImageStatus.OK


@pytest.mark.unit
def test_audit_counts(auditor):
    audit = auditor.audit(
        [
            Image(src="https://cdn.example.com/hero.jpg", alt="Spring flowers"),
            Image(src="https://cdn.example.com/banner.jpg", alt=None),
            Image(src="https://track.example.com/open/pixel.gif", alt=""),
        ]
    )
    assert audit.counts() == {"OK": 2, "MISSING": 1, "EMPTY": 0, "GENERIC": 0}
    assert audit.has_missing_alt

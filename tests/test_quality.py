"""Tests for the face quality heuristic."""

from identity_service.recognition import assess_face_quality, quality_feedback
from identity_service.recognition.quality import UNKNOWN_QUALITY, FaceQuality

from conftest import make_detection

FRAME_W, FRAME_H = 640, 480


class TestAssessFaceQuality:
    """Test cases for assess_face_quality."""

    def test_no_detection(self, config):
        quality = assess_face_quality(None, FRAME_W, FRAME_H, config)

        assert quality == FaceQuality('unknown', 'unknown', 'unknown', 0)

    def test_empty_frame_size(self, config):
        """A zero-sized frame yields unknown quality instead of dividing by zero."""
        detection = make_detection([0.0])

        assert assess_face_quality(detection, 0, FRAME_H, config) == UNKNOWN_QUALITY
        assert assess_face_quality(detection, FRAME_W, 0, config) == UNKNOWN_QUALITY
        assert assess_face_quality(detection, 0, 0, config) == UNKNOWN_QUALITY

    def test_good_face(self, config):
        quality = assess_face_quality(make_detection([0.0]), FRAME_W, FRAME_H, config)

        assert quality.distance == 'optimal'
        assert quality.lighting == 'optimal'
        assert quality.angle == 'good'
        assert quality.overall_score == 100

    def test_too_close(self, config):
        detection = make_detection([0.0], bbox=(0, 0, 600, 450))
        quality = assess_face_quality(detection, FRAME_W, FRAME_H, config)

        assert quality.distance == 'too-close'
        assert quality.overall_score == 83

    def test_too_far(self, config):
        detection = make_detection([0.0], bbox=(300, 200, 360, 260))
        quality = assess_face_quality(detection, FRAME_W, FRAME_H, config)

        assert quality.distance == 'too-far'
        assert quality.overall_score == 80

    def test_lighting_bands(self, config):
        scores = {0.95: ('optimal', 100), 0.8: ('optimal', 93), 0.6: ('dark', 87), 0.3: ('dark', 77)}

        for det_score, (label, overall) in scores.items():
            quality = assess_face_quality(
                make_detection([0.0], score=det_score), FRAME_W, FRAME_H, config
            )
            assert quality.lighting == label
            assert quality.overall_score == overall

    def test_tilted_by_nose_offset(self, config):
        landmarks = [[280, 200], [360, 200], [345, 250], [290, 300], [350, 300]]
        quality = assess_face_quality(
            make_detection([0.0], landmarks=landmarks), FRAME_W, FRAME_H, config
        )

        assert quality.angle == 'tilted'
        assert quality.overall_score == 87

    def test_tilted_by_eye_angle(self, config):
        landmarks = [[280, 200], [360, 240], [320, 260], [290, 300], [350, 300]]
        quality = assess_face_quality(
            make_detection([0.0], landmarks=landmarks), FRAME_W, FRAME_H, config
        )

        assert quality.angle == 'tilted'

    def test_below_registration_gate(self, config):
        """Far, dark and tilted faces score under 60."""
        landmarks = [[300, 200], [340, 230], [335, 240], [300, 250], [340, 250]]
        detection = make_detection([0.0], bbox=(300, 200, 360, 260), score=0.4, landmarks=landmarks)
        quality = assess_face_quality(detection, FRAME_W, FRAME_H, config)

        assert quality.overall_score == 43
        assert quality.overall_score < config.min_quality_score


class TestQualityFeedback:
    """Test cases for quality_feedback."""

    def test_ready(self):
        assert quality_feedback(FaceQuality('optimal', 'optimal', 'good', 100)) == 'Perfect! Ready to capture'

    def test_combined_hints(self):
        message = quality_feedback(FaceQuality('too-far', 'dark', 'tilted', 43))
        assert message == 'Move closer • Improve lighting • Face camera directly'

    def test_too_close_and_bright(self):
        message = quality_feedback(FaceQuality('too-close', 'bright', 'good', 80))
        assert message == 'Move back a bit • Reduce brightness'

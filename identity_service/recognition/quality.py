"""
Face quality assessment module.

Evaluates a detected face for registration based on:
- Distance (face box area relative to the frame)
- Lighting (detector confidence as a proxy)
- Angle (eye line tilt and nose offset from the eye midpoint)
"""

import math
from dataclasses import dataclass
from typing import Optional
from ..config import Config
from .detection import FaceDetection

LEFT_EYE, RIGHT_EYE, NOSE = 0, 1, 2


@dataclass(frozen=True)
class FaceQuality:
    """
    Quality labels and overall score for one face.

    distance: 'too-close', 'optimal', 'too-far' or 'unknown'
    lighting: 'dark', 'optimal', 'bright' or 'unknown'
    angle: 'good', 'tilted' or 'unknown'
    overall_score: 0-100
    """

    distance: str
    lighting: str
    angle: str
    overall_score: int


UNKNOWN_QUALITY = FaceQuality('unknown', 'unknown', 'unknown', 0)


def assess_face_quality(
    detection: Optional[FaceDetection],
    frame_width: int,
    frame_height: int,
    config: Config
) -> FaceQuality:
    """
    Score a detected face for capture.

    Args:
        detection: Detected face or None
        frame_width: Frame width in pixels
        frame_height: Frame height in pixels
        config: Service configuration (ratio and angle cutoffs)

    Returns:
        FaceQuality; all 'unknown' with score 0 when no face was detected
        or the frame has no area
    """
    if detection is None or frame_width <= 0 or frame_height <= 0:
        return UNKNOWN_QUALITY

    # Distance
    face_ratio = (detection.width * detection.height) / float(frame_width * frame_height)

    if face_ratio > config.too_close_ratio:
        distance, distance_score = 'too-close', 50
    elif face_ratio < config.too_far_ratio:
        distance, distance_score = 'too-far', 40
    else:
        distance, distance_score = 'optimal', 100

    # Lighting
    if detection.score > 0.9:
        lighting, lighting_score = 'optimal', 100
    elif detection.score > 0.7:
        lighting, lighting_score = 'optimal', 80
    elif detection.score > 0.5:
        lighting, lighting_score = 'dark', 60
    else:
        lighting, lighting_score = 'dark', 30

    # Angle
    angle, angle_score = 'good', 100
    landmarks = detection.landmarks

    if landmarks is not None and len(landmarks) > NOSE:
        left_eye, right_eye, nose = landmarks[LEFT_EYE], landmarks[RIGHT_EYE], landmarks[NOSE]

        eye_distance = math.hypot(right_eye[0] - left_eye[0], right_eye[1] - left_eye[1])
        if eye_distance > 0:
            eye_center_x = (left_eye[0] + right_eye[0]) / 2
            horizontal_deviation = abs(nose[0] - eye_center_x) / eye_distance
            eye_angle = abs(math.degrees(math.atan2(
                right_eye[1] - left_eye[1], right_eye[0] - left_eye[0]
            )))

            if (horizontal_deviation > config.max_nose_deviation or
                    eye_angle > config.max_eye_angle):
                angle, angle_score = 'tilted', 60

    overall_score = int(round((distance_score + lighting_score + angle_score) / 3))

    return FaceQuality(distance, lighting, angle, overall_score)


def quality_feedback(quality: FaceQuality) -> str:
    """
    Build a user-facing hint for improving capture quality.

    Args:
        quality: Assessed quality

    Returns:
        Hints joined with ' • ', or a ready message
    """
    messages = []

    if quality.distance == 'too-close':
        messages.append('Move back a bit')
    elif quality.distance == 'too-far':
        messages.append('Move closer')

    if quality.lighting == 'dark':
        messages.append('Improve lighting')
    elif quality.lighting == 'bright':
        messages.append('Reduce brightness')

    if quality.angle == 'tilted':
        messages.append('Face camera directly')

    if not messages:
        return 'Perfect! Ready to capture'

    return ' • '.join(messages)

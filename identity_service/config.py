"""
Configuration module for Identity Service.

Loads configuration from environment variables with sensible defaults.
All settings are immutable after initialization.
"""

import os
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration for Identity Service.

    Backend Integration:
        backend_url: Base URL of the PostgREST backend (e.g., https://xyz.supabase.co)
        backend_api_key: API key sent as `apikey` and bearer token (may be empty)
        request_timeout: Timeout in seconds for backend HTTP calls

    Camera Settings:
        camera_source: Camera source - integer index for a local webcam
            or an RTSP/HTTP stream URL

    Service Identity:
        service_name: Name of this service instance (log context)
        api_port: Port for Flask HTTP server

    Matching:
        match_threshold: Maximum Euclidean distance accepted as a match
        recognition_interval: Seconds between recognition passes
        history_size: Number of recent recognition results kept

    Registration:
        registration_samples: Embedding samples captured per registration
        registration_sample_delay: Pause between samples in seconds
        min_quality_score: Minimum overall quality score to start capture

    Quality Heuristic:
        too_close_ratio: Face/frame area ratio above which face is too close
        too_far_ratio: Face/frame area ratio below which face is too far
        max_nose_deviation: Nose offset (relative to eye distance) before tilted
        max_eye_angle: Eye-line angle in degrees before tilted

    InsightFace:
        insightface_det_size: Detection size for InsightFace (width, height)

    System:
        log_recognitions: Post recognitions to the backend log table
        debug_mode: Enable debug logging
    """

    # Backend
    backend_url: str
    backend_api_key: str
    request_timeout: float

    # Camera
    camera_source: str

    # Service
    service_name: str
    api_port: int

    # Matching
    match_threshold: float
    recognition_interval: float
    history_size: int

    # Registration
    registration_samples: int
    registration_sample_delay: float
    min_quality_score: int

    # Quality
    too_close_ratio: float
    too_far_ratio: float
    max_nose_deviation: float
    max_eye_angle: float

    # InsightFace
    insightface_det_size: Tuple[int, int]

    # System
    log_recognitions: bool
    debug_mode: bool


def load_config() -> Config:
    """
    Load configuration from environment variables.

    Returns:
        Config: Immutable configuration object
    """
    det_size = int(os.getenv('INSIGHTFACE_DET_SIZE', '640'))

    return Config(
        # Backend
        backend_url=os.getenv('BACKEND_URL', 'http://localhost:54321').rstrip('/'),
        backend_api_key=os.getenv('BACKEND_API_KEY', ''),
        request_timeout=float(os.getenv('REQUEST_TIMEOUT', '10')),

        # Camera
        camera_source=os.getenv('CAMERA_SOURCE', '0'),

        # Service
        service_name=os.getenv('SERVICE_NAME', 'identity'),
        api_port=int(os.getenv('API_PORT', '5001')),

        # Matching
        match_threshold=float(os.getenv('MATCH_THRESHOLD', '0.6')),
        recognition_interval=float(os.getenv('RECOGNITION_INTERVAL', '1.0')),
        history_size=int(os.getenv('HISTORY_SIZE', '10')),

        # Registration
        registration_samples=int(os.getenv('REGISTRATION_SAMPLES', '3')),
        registration_sample_delay=float(os.getenv('REGISTRATION_DELAY', '0.8')),
        min_quality_score=int(os.getenv('MIN_QUALITY_SCORE', '60')),

        # Quality
        too_close_ratio=float(os.getenv('TOO_CLOSE_RATIO', '0.35')),
        too_far_ratio=float(os.getenv('TOO_FAR_RATIO', '0.08')),
        max_nose_deviation=float(os.getenv('MAX_NOSE_DEVIATION', '0.2')),
        max_eye_angle=float(os.getenv('MAX_EYE_ANGLE', '15')),

        # InsightFace
        insightface_det_size=(det_size, det_size),

        # System
        log_recognitions=os.getenv('LOG_RECOGNITIONS', 'false').lower() == 'true',
        debug_mode=os.getenv('DEBUG', 'false').lower() == 'true',
    )

"""
Camera connection module.

Handles connection to local webcams (index 0, 1, 2) and RTSP/HTTP streams,
with reconnection after repeated read failures.
"""

import time
import cv2
import numpy as np
from typing import Union
from .config import Config
from .logging_config import get_logger

logger = get_logger(__name__)


def _camera_source(camera_source: str) -> Union[int, str]:
    """Local index for numeric sources, URL otherwise."""
    try:
        return int(camera_source)
    except ValueError:
        return camera_source


def connect_camera(config: Config, max_retries: int = 5) -> cv2.VideoCapture:
    """
    Connect to camera with retry logic.

    Args:
        config: Service configuration
        max_retries: Maximum connection attempts

    Returns:
        Opened VideoCapture object

    Raises:
        RuntimeError: If connection fails after max_retries
    """
    source = _camera_source(config.camera_source)
    camera_type = 'local' if isinstance(source, int) else 'stream'

    for attempt in range(max_retries):
        logger.info(f'Connecting to {camera_type} camera (attempt {attempt + 1}/{max_retries})...')

        video_capture = cv2.VideoCapture(source)

        if video_capture.isOpened():
            ret, frame = video_capture.read()
            if ret and frame is not None:
                logger.info(f'✅ Camera connected ({camera_type})')
                logger.info(f'Frame size: {frame.shape[1]}x{frame.shape[0]}')
                return video_capture

            video_capture.release()
            logger.warning('Camera opened but failed to read frame')
        else:
            logger.warning('Failed to open camera')

        # Exponential backoff
        if attempt < max_retries - 1:
            wait_time = 2 ** attempt
            logger.info(f'Retrying in {wait_time} seconds...')
            time.sleep(wait_time)

    raise RuntimeError(f'Cannot connect to camera after {max_retries} attempts')


def reconnect_camera(video_capture: cv2.VideoCapture, config: Config) -> cv2.VideoCapture:
    """
    Release the current capture and connect again.

    Args:
        video_capture: Current VideoCapture (will be released)
        config: Service configuration

    Returns:
        New VideoCapture
    """
    logger.error('Too many read failures, reconnecting...')

    try:
        video_capture.release()
    except cv2.error as e:
        logger.warning(f'Error releasing camera: {e}')

    time.sleep(2)
    return connect_camera(config)


def frame_grabber(video_capture: cv2.VideoCapture):
    """
    Build a callable returning the latest frame.

    Raises RuntimeError from the callable if the camera stops delivering.
    """
    def grab() -> np.ndarray:
        ret, frame = video_capture.read()
        if not ret or frame is None:
            raise RuntimeError('Failed to read frame from camera')
        return frame

    return grab

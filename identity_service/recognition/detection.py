"""
Face detection result type shared by the embedding source and quality checks.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional


@dataclass
class FaceDetection:
    """
    One detected face.

    Attributes:
        bbox: Bounding box [x1, y1, x2, y2] in pixels
        score: Detector confidence in [0, 1]
        landmarks: 5x2 keypoints (left eye, right eye, nose, mouth corners) or None
        embedding: Face embedding
    """

    bbox: np.ndarray
    score: float
    landmarks: Optional[np.ndarray]
    embedding: np.ndarray

    @property
    def width(self) -> float:
        return float(self.bbox[2] - self.bbox[0])

    @property
    def height(self) -> float:
        return float(self.bbox[3] - self.bbox[1])

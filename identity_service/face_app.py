"""
InsightFace initialization module.

Provides face detection and embedding extraction using InsightFace models.
"""

import numpy as np
from typing import List, Optional
from insightface.app import FaceAnalysis
from .config import Config
from .logging_config import get_logger
from .recognition.detection import FaceDetection

logger = get_logger(__name__)


def initialize_face_app(config: Config) -> FaceAnalysis:
    """
    Initialize InsightFace FaceAnalysis.

    Args:
        config: Service configuration

    Returns:
        Initialized FaceAnalysis instance
    """
    logger.info('Initializing InsightFace AI...')

    face_app = FaceAnalysis(providers=['CPUExecutionProvider'])
    face_app.prepare(ctx_id=0, det_size=config.insightface_det_size)

    logger.info(f'✅ InsightFace initialized (det_size={config.insightface_det_size})')

    return face_app


class FaceEmbedder:
    """
    Embedding source backed by InsightFace.

    Models are loaded on first use; load_models() is idempotent.
    """

    def __init__(self, config: Config):
        self.config = config
        self._face_app: Optional[FaceAnalysis] = None

    @property
    def is_ready(self) -> bool:
        return self._face_app is not None

    def load_models(self) -> None:
        if self._face_app is None:
            self._face_app = initialize_face_app(self.config)

    def extract_all_embeddings(self, frame: np.ndarray) -> List[FaceDetection]:
        """
        Detect every face in a frame.

        Args:
            frame: Image in BGR format

        Returns:
            Detections with normalized embeddings, empty if no face found
        """
        self.load_models()

        faces = self._face_app.get(frame)

        return [
            FaceDetection(
                bbox=np.asarray(face.bbox, dtype=np.float32),
                score=float(face.det_score),
                landmarks=np.asarray(face.kps) if face.kps is not None else None,
                embedding=np.asarray(face.normed_embedding, dtype=np.float32),
            )
            for face in faces
        ]

    def extract_embedding(self, image: np.ndarray) -> Optional[np.ndarray]:
        """
        Extract the embedding of the most confident face.

        Args:
            image: Image in BGR format

        Returns:
            Embedding or None if no face found
        """
        detections = self.extract_all_embeddings(image)

        if not detections:
            return None

        best = max(detections, key=lambda d: d.score)
        return best.embedding

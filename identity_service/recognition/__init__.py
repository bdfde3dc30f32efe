"""
Recognition algorithms package.

Contains modules for:
- Embedding registry (hash-indexed by normalized name)
- Nearest-neighbour embedding matching
- Name trie for autocomplete
- Face quality assessment
"""

from .detection import FaceDetection
from .registry import EmbeddingRegistry, normalize_name
from .matching import Match, NearestNeighborMatcher, average_embedding, euclidean_distance
from .trie import NameTrie
from .quality import FaceQuality, assess_face_quality, quality_feedback

__all__ = [
    'FaceDetection',
    'EmbeddingRegistry',
    'normalize_name',
    'Match',
    'NearestNeighborMatcher',
    'average_embedding',
    'euclidean_distance',
    'NameTrie',
    'FaceQuality',
    'assess_face_quality',
    'quality_feedback',
]

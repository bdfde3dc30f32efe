"""
Embedding matching module.

Matches face embeddings against registered identities using Euclidean distance.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence
from .registry import EmbeddingRegistry

DEFAULT_THRESHOLD = 0.6


@dataclass(frozen=True)
class Match:
    """Closest registered identity for a query embedding."""

    name: str
    confidence: float
    distance: float


def euclidean_distance(embedding1, embedding2) -> float:
    """
    Compute Euclidean distance between two embeddings.

    Args:
        embedding1: First embedding
        embedding2: Second embedding

    Returns:
        Square root of the summed squared differences

    Raises:
        ValueError: If the embeddings have different lengths
    """
    a = np.asarray(embedding1, dtype=np.float64)
    b = np.asarray(embedding2, dtype=np.float64)

    if a.shape != b.shape:
        raise ValueError(f'Embedding shapes differ: {a.shape} vs {b.shape}')

    return float(np.sqrt(np.sum((a - b) ** 2)))


def average_embedding(samples: Sequence) -> np.ndarray:
    """
    Average several embedding samples of the same face.

    More reliable than a single capture.

    Args:
        samples: Embeddings of equal length

    Returns:
        Element-wise mean embedding

    Raises:
        ValueError: If no samples are given
    """
    if len(samples) == 0:
        raise ValueError('At least one embedding sample is required')
    return np.mean(np.asarray(samples, dtype=np.float64), axis=0)


class NearestNeighborMatcher:
    """
    Exact nearest-neighbour search over an EmbeddingRegistry.

    Linear scan, O(N*D) per query. Registered sets are small, so no
    approximate index is used.
    """

    def __init__(self, registry: EmbeddingRegistry):
        self.registry = registry

    def match(self, embedding, threshold: float = DEFAULT_THRESHOLD) -> Optional[Match]:
        """
        Find the closest registered identity.

        Ties keep the first entry seen in registry order.

        Args:
            embedding: Query embedding
            threshold: Distance must be strictly below this to match

        Returns:
            Match or None if the registry is empty or nothing is close enough

        Confidence is 1 - distance clamped to [0, 1]. It is not a
        calibrated probability.
        """
        best_name: Optional[str] = None
        best_distance = float('inf')

        for name, stored in self.registry.entries():
            distance = euclidean_distance(embedding, stored)
            if distance < best_distance:
                best_name = name
                best_distance = distance

        if best_name is None or best_distance >= threshold:
            return None

        confidence = float(np.clip(1.0 - best_distance, 0.0, 1.0))
        return Match(name=best_name, confidence=confidence, distance=best_distance)

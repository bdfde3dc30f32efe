"""
Embedding registry module.

Hash-indexed store of one embedding per identity, keyed by normalized name.
"""

import numpy as np
from typing import Dict, List, Optional, Tuple


def normalize_name(name: str) -> str:
    """
    Normalize a name into a lookup key.

    Args:
        name: Display name

    Returns:
        Lower-cased key
    """
    return name.lower()


class EmbeddingRegistry:
    """
    Maps normalized names to embeddings.

    Holds the current representative embedding per identity, not a history:
    setting an existing name overwrites it. Not thread-safe.
    """

    def __init__(self):
        self._embeddings: Dict[str, np.ndarray] = {}

    def set(self, name: str, embedding) -> None:
        """
        Store embedding under the normalized name.

        Args:
            name: Identity name (any casing)
            embedding: Embedding vector
        """
        vector = np.array(embedding, dtype=np.float64)
        vector.flags.writeable = False
        self._embeddings[normalize_name(name)] = vector

    def get(self, name: str) -> Optional[np.ndarray]:
        """
        Get embedding for a name.

        Returns:
            Stored embedding or None if not registered
        """
        return self._embeddings.get(normalize_name(name))

    def has(self, name: str) -> bool:
        return normalize_name(name) in self._embeddings

    def delete(self, name: str) -> bool:
        """
        Remove an identity.

        Returns:
            True if an entry was removed
        """
        return self._embeddings.pop(normalize_name(name), None) is not None

    def entries(self) -> List[Tuple[str, np.ndarray]]:
        """Snapshot of (normalized_name, embedding) pairs in insertion order."""
        return list(self._embeddings.items())

    def names(self) -> List[str]:
        return list(self._embeddings.keys())

    def clear(self) -> None:
        self._embeddings.clear()

    def __len__(self) -> int:
        return len(self._embeddings)

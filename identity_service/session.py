"""
Recognition session module.

Ties the embedding source, identity store, registry, matcher and name trie
together:
- Loading identities into registry and trie as one step
- Per-frame recognition with at most one pass in flight
- Registration (quality gate, sample capture, averaging)
- Deletion, search and lookup
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence
import numpy as np
from .config import Config
from .errors import FaceQualityError, SessionNotReadyError, StructuralInconsistencyError
from .events import log_recognition
from .identities import IdentityRecord
from .logging_config import get_logger
from .recognition.matching import NearestNeighborMatcher, average_embedding
from .recognition.quality import assess_face_quality, quality_feedback
from .recognition.registry import EmbeddingRegistry, normalize_name
from .recognition.trie import NameTrie

logger = get_logger(__name__)


class SessionState(Enum):
    UNINITIALIZED = 'uninitialized'
    MODELS_LOADING = 'models_loading'
    READY = 'ready'


@dataclass(frozen=True)
class RecognitionResult:
    """Recognized identity, shown to users. Not persisted."""

    name: str
    confidence: float
    timestamp: float

    def as_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'confidence': self.confidence, 'timestamp': self.timestamp}


class RecognitionSession:
    """
    Caller-owned recognition context.

    Args:
        embedder: Embedding source with load_models(), extract_embedding()
            and extract_all_embeddings()
        store: Identity store with load_all(), insert() and delete()
        config: Service configuration
    """

    def __init__(self, embedder: Any, store: Any, config: Config):
        self.embedder = embedder
        self.store = store
        self.config = config

        self.registry = EmbeddingRegistry()
        self.matcher = NearestNeighborMatcher(self.registry)
        self.trie = NameTrie()

        self._records: Dict[str, IdentityRecord] = {}
        self._history: deque = deque(maxlen=config.history_size)
        self._state = SessionState.UNINITIALIZED

        # Serializes every read and write of registry, trie and records
        self._lock = threading.RLock()
        # Held for the duration of one recognition pass
        self._busy = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    # Loading

    def load(self) -> None:
        """
        Load models and rebuild registry and trie from the backend.

        Raises:
            PersistenceError: If identities cannot be fetched
            StructuralInconsistencyError: If registry and trie diverge
        """
        with self._lock:
            self._state = SessionState.MODELS_LOADING
            try:
                self.embedder.load_models()
                records = self.store.load_all()
                self.load_records(records)
            except Exception:
                self._state = SessionState.UNINITIALIZED
                raise
            self._state = SessionState.READY

        logger.info(f'✅ Session ready with {len(self.registry)} identities')

    def load_records(self, records: Sequence[IdentityRecord]) -> None:
        """
        Replace registry and trie contents with the given records.

        Args:
            records: Identity records, newest first

        Raises:
            StructuralInconsistencyError: If registry and trie end up with
                different identity sets
        """
        with self._lock:
            self.registry.clear()
            self.trie.clear()
            self._records = {}

            for record in records:
                self.registry.set(record.name, record.embedding)
                self.trie.insert(record.name)
                self._records[normalize_name(record.name)] = record

            self._check_consistency()

    def reload(self) -> None:
        """Drop all in-memory state and load again from the backend."""
        with self._lock:
            self.clear()
            self.load()

    def clear(self) -> None:
        with self._lock:
            self.registry.clear()
            self.trie.clear()
            self._records = {}
            self._state = SessionState.UNINITIALIZED

    def _check_consistency(self) -> None:
        registry_names = set(self.registry.names())
        trie_names = {normalize_name(name) for name in self.trie.search_with_prefix('')}

        if registry_names != trie_names:
            self._state = SessionState.UNINITIALIZED
            raise StructuralInconsistencyError(
                f'Registry has {len(registry_names)} identities, trie has {len(trie_names)}'
            )

    def _require_ready(self) -> None:
        if self._state is not SessionState.READY:
            raise SessionNotReadyError(f'Session is {self._state.value}')

    def _check_dimension(self, embedding: np.ndarray) -> None:
        entries = self.registry.entries()
        if not entries:
            return
        expected = entries[0][1].shape
        if np.shape(embedding) != expected:
            raise ValueError(
                f'Embedding length {np.size(embedding)} does not match registered length {expected[0]}'
            )

    # Recognition

    def process_frame(self, frame: np.ndarray) -> List[RecognitionResult]:
        """
        Run one recognition pass over a frame.

        A call made while another pass is in flight is dropped.

        Args:
            frame: Image in BGR format

        Returns:
            Results for every recognized face, empty if none or busy

        Raises:
            SessionNotReadyError: If the session is not READY
        """
        # Waits for an in-progress reload or registration
        with self._lock:
            self._require_ready()

        if not self._busy.acquire(blocking=False):
            logger.debug('Recognition pass in flight, frame skipped')
            return []

        try:
            detections = self.embedder.extract_all_embeddings(frame)

            results: List[RecognitionResult] = []
            with self._lock:
                for detection in detections:
                    result = self._match_to_result(detection.embedding, self.config.match_threshold)
                    if result is not None:
                        results.append(result)

                for result in reversed(results):
                    self._history.appendleft(result)

            for result in results:
                logger.info(f'Recognized {result.name} (confidence: {result.confidence:.3f})')
                if self.config.log_recognitions:
                    record = self.lookup(result.name)
                    log_recognition(
                        result.name, result.confidence, self.config,
                        identity_id=record.id if record else None,
                    )

            return results
        finally:
            self._busy.release()

    def match(self, embedding, threshold: Optional[float] = None) -> Optional[RecognitionResult]:
        """
        Match a single embedding against registered identities.

        Args:
            embedding: Query embedding
            threshold: Distance threshold, defaults to config.match_threshold

        Returns:
            RecognitionResult with display casing or None on no match
        """
        if threshold is None:
            threshold = self.config.match_threshold
        with self._lock:
            return self._match_to_result(embedding, threshold)

    def _match_to_result(self, embedding, threshold: float) -> Optional[RecognitionResult]:
        found = self.matcher.match(embedding, threshold)
        if found is None:
            return None

        record = self._records.get(found.name)
        display_name = record.name if record else found.name
        return RecognitionResult(name=display_name, confidence=found.confidence, timestamp=time.time())

    def recent_results(self) -> List[RecognitionResult]:
        """Most recent recognition results, newest first."""
        with self._lock:
            return list(self._history)

    # Search

    def search(self, prefix: str) -> List[str]:
        with self._lock:
            return self.trie.search_with_prefix(prefix)

    def lookup(self, name: str) -> Optional[IdentityRecord]:
        with self._lock:
            return self._records.get(normalize_name(name))

    def identities(self) -> List[IdentityRecord]:
        """All loaded identities, newest first."""
        with self._lock:
            records = list(self._records.values())
        return sorted(
            records,
            key=lambda r: r.created_at.timestamp() if r.created_at else 0.0,
            reverse=True,
        )

    # Registration

    def capture_registration_samples(self, grab_frame: Callable[[], np.ndarray]) -> List[np.ndarray]:
        """
        Capture embedding samples of one face for registration.

        The first frame must contain a face of acceptable quality. A face
        lost during capture aborts it; the caller decides whether to retry.

        Args:
            grab_frame: Returns the current camera frame

        Returns:
            config.registration_samples embeddings, or empty list if a face
            was not detected

        Raises:
            FaceQualityError: If the face quality is below config.min_quality_score
        """
        frame = grab_frame()
        detections = self.embedder.extract_all_embeddings(frame)

        if not detections:
            logger.warning('No face detected, registration capture not started')
            return []

        height, width = frame.shape[:2]
        quality = assess_face_quality(detections[0], width, height, self.config)

        if quality.overall_score < self.config.min_quality_score:
            logger.warning(f'Face quality {quality.overall_score}: {quality_feedback(quality)}')
            raise FaceQualityError(quality)

        samples: List[np.ndarray] = []
        for i in range(self.config.registration_samples):
            if i > 0:
                time.sleep(self.config.registration_sample_delay)

            embedding = self.embedder.extract_embedding(grab_frame())
            if embedding is None:
                logger.warning(f'Face not detected for sample {i + 1}, capture aborted')
                return []

            samples.append(embedding)
            logger.debug(f'Captured sample {i + 1}/{self.config.registration_samples}')

        return samples

    def register(self, name: str, samples: Sequence) -> IdentityRecord:
        """
        Register a new identity from embedding samples.

        Samples are averaged, persisted, and registry and trie are rebuilt
        from the backend.

        Args:
            name: Display name
            samples: One or more embeddings of the same face

        Returns:
            Stored identity record

        Raises:
            ValueError: If the name is blank, no samples are given, or the
                samples differ in length from registered embeddings
            DuplicateNameError: If the name is already registered
            PersistenceError: On any other backend failure
        """
        name = name.strip()
        if not name:
            raise ValueError('Name must not be empty')

        embedding = average_embedding(samples)

        with self._lock:
            self._check_dimension(embedding)
            record = self.store.insert(name, embedding)
            logger.info(f'Registered {name} with {len(samples)} samples')
            self.reload()

        return record

    def delete(self, name: str) -> bool:
        """
        Delete an identity from the backend and the in-memory structures.

        Returns:
            False if the name is not registered
        """
        with self._lock:
            record = self._records.get(normalize_name(name))
            if record is None:
                return False

            if record.id is not None:
                self.store.delete(record.id)

            key = normalize_name(name)
            self.registry.delete(key)
            self.trie.remove(record.name)
            del self._records[key]

        logger.info(f'Deleted {record.name}')
        return True

"""Pytest configuration and fixtures."""

import dataclasses
import itertools
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from identity_service.config import load_config
from identity_service.errors import DuplicateNameError
from identity_service.identities import IdentityRecord
from identity_service.recognition.detection import FaceDetection


class FakeEmbedder:
    """Embedding source returning queued detections."""

    def __init__(self):
        self.load_calls = 0
        self.detections = []
        self.embeddings = []

    def load_models(self):
        self.load_calls += 1

    def extract_all_embeddings(self, frame):
        return list(self.detections)

    def extract_embedding(self, image):
        if not self.embeddings:
            return None
        return self.embeddings.pop(0)


class FakeStore:
    """In-memory identity store with backend-like name uniqueness."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.deleted = []
        self._ids = itertools.count(100)
        self._clock = datetime(2025, 10, 8, tzinfo=timezone.utc)

    def load_all(self):
        return sorted(self.records, key=lambda r: r.created_at, reverse=True)

    def insert(self, name, embedding):
        if any(r.name.lower() == name.lower() for r in self.records):
            raise DuplicateNameError(name)
        self._clock += timedelta(minutes=1)
        record = IdentityRecord(
            id=str(next(self._ids)),
            name=name,
            embedding=np.asarray(embedding, dtype=np.float64),
            created_at=self._clock,
        )
        self.records.append(record)
        return record

    def delete(self, identity_id):
        self.deleted.append(identity_id)
        self.records = [r for r in self.records if r.id != identity_id]


def make_record(identity_id, name, embedding, day=1):
    return IdentityRecord(
        id=identity_id,
        name=name,
        embedding=np.asarray(embedding, dtype=np.float64),
        created_at=datetime(2025, 10, day, tzinfo=timezone.utc),
    )


def make_detection(embedding, bbox=(200, 100, 440, 380), score=0.95, landmarks=None):
    if landmarks is None:
        landmarks = [[280, 200], [360, 200], [320, 250], [290, 300], [350, 300]]
    return FaceDetection(
        bbox=np.asarray(bbox, dtype=np.float32),
        score=score,
        landmarks=np.asarray(landmarks, dtype=np.float32),
        embedding=np.asarray(embedding, dtype=np.float32),
    )


@pytest.fixture
def config():
    """Configuration with fast, deterministic settings."""
    return dataclasses.replace(
        load_config(),
        backend_url='http://backend.test',
        backend_api_key='test-key',
        match_threshold=0.6,
        history_size=10,
        registration_samples=3,
        registration_sample_delay=0.0,
        min_quality_score=60,
        too_close_ratio=0.35,
        too_far_ratio=0.08,
        max_nose_deviation=0.2,
        max_eye_angle=15.0,
        log_recognitions=False,
    )


@pytest.fixture
def sample_frame():
    """Blank 640x480 BGR frame."""
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def store():
    return FakeStore([
        make_record('1', 'Alice', [0.0, 0.0, 0.0], day=1),
        make_record('2', 'Bob', [10.0, 10.0, 10.0], day=2),
    ])

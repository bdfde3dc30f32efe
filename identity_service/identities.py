"""
Identity persistence module.

Loads, inserts and deletes registered identities in the backend
`face_embeddings` table through its PostgREST API.
"""

import requests
import numpy as np
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from .config import Config
from .errors import DuplicateNameError, PersistenceError
from .logging_config import get_logger

logger = get_logger(__name__)

UNIQUE_VIOLATION = '23505'


@dataclass(frozen=True)
class IdentityRecord:
    """Registered identity as persisted by the backend."""

    id: Optional[str]
    name: str
    embedding: np.ndarray
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'IdentityRecord':
        return cls(
            id=row.get('id'),
            name=row['name'],
            embedding=np.asarray(row['embedding'], dtype=np.float64),
            created_at=_parse_timestamp(row.get('created_at')),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class IdentityStore:
    """
    Backend client for the `face_embeddings` table.

    Name uniqueness is enforced by the backend; a violation is raised as
    DuplicateNameError. Nothing is retried here.
    """

    def __init__(self, config: Config):
        self.config = config
        self.url = f'{config.backend_url}/rest/v1/face_embeddings'

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.config.backend_api_key:
            headers['apikey'] = self.config.backend_api_key
            headers['Authorization'] = f'Bearer {self.config.backend_api_key}'
        return headers

    def load_all(self) -> List[IdentityRecord]:
        """
        Fetch all identities, newest first.

        Returns:
            List of identity records

        Raises:
            PersistenceError: If the backend request fails
        """
        logger.info('Loading identities from backend...')

        try:
            response = requests.get(
                self.url,
                params={'select': 'id,name,embedding,created_at', 'order': 'created_at.desc'},
                headers=self._headers(),
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f'Failed to fetch identities from backend: {e}')
            raise PersistenceError(f'Failed to fetch identities: {e}') from e

        records = [IdentityRecord.from_row(row) for row in response.json()]
        logger.info(f'Fetched {len(records)} identities from backend')
        return records

    def insert(self, name: str, embedding) -> IdentityRecord:
        """
        Persist a new identity.

        Args:
            name: Display name (unique, case-insensitive)
            embedding: Representative embedding

        Returns:
            Stored record as returned by the backend

        Raises:
            DuplicateNameError: If the name is already registered
            PersistenceError: On any other backend failure
        """
        payload = {
            'name': name,
            'embedding': [float(x) for x in np.asarray(embedding).ravel()],
        }
        headers = self._headers()
        headers['Prefer'] = 'return=representation'

        try:
            response = requests.post(
                self.url, json=payload, headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f'Failed to register {name}: {e}')
            raise PersistenceError(f'Failed to register {name}: {e}') from e

        if response.status_code == 409 or _error_code(response) == UNIQUE_VIOLATION:
            logger.warning(f'Name already registered: {name}')
            raise DuplicateNameError(name)

        if not response.ok:
            logger.error(f'Failed to register {name}: {response.status_code} {response.text}')
            raise PersistenceError(f'Failed to register {name}: HTTP {response.status_code}')

        rows = response.json()
        row = rows[0] if isinstance(rows, list) and rows else {}
        logger.info(f'✅ Registered {name}')

        if not row:
            return IdentityRecord(id=None, name=name, embedding=np.asarray(embedding, dtype=np.float64))
        return IdentityRecord.from_row(row)

    def delete(self, identity_id: str) -> None:
        """
        Delete an identity by id.

        Raises:
            PersistenceError: If the backend request fails
        """
        try:
            response = requests.delete(
                self.url,
                params={'id': f'eq.{identity_id}'},
                headers=self._headers(),
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f'Failed to delete identity {identity_id}: {e}')
            raise PersistenceError(f'Failed to delete identity {identity_id}: {e}') from e

        logger.info(f'Deleted identity {identity_id}')


def _error_code(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get('code')
    return None

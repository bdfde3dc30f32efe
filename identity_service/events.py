"""
Recognition log module.

Sends recognition results to the backend `recognition_logs` table.
"""

import requests
from typing import Optional
from .config import Config
from .logging_config import get_logger

logger = get_logger(__name__)


def log_recognition(
    name: str,
    confidence: float,
    config: Config,
    identity_id: Optional[str] = None
) -> bool:
    """
    Send a recognition event to the backend.

    Failures are logged and reported, never raised.

    Args:
        name: Recognized display name
        confidence: Match confidence in [0, 1]
        config: Service configuration
        identity_id: Backend id of the matched identity, if known

    Returns:
        True if the event was stored
    """
    url = f'{config.backend_url}/rest/v1/recognition_logs'

    payload = {
        'recognized_name': name,
        'confidence': round(float(confidence), 4),
        'face_embedding_id': identity_id,
    }

    headers = {'Content-Type': 'application/json'}
    if config.backend_api_key:
        headers['apikey'] = config.backend_api_key
        headers['Authorization'] = f'Bearer {config.backend_api_key}'

    try:
        logger.debug(f'📤 Logging recognition of {name} ({confidence:.0%})')

        response = requests.post(url, json=payload, headers=headers, timeout=config.request_timeout)

        if response.ok:
            return True

        logger.error(f'❌ Failed to log recognition: {response.status_code} {response.text}')
        return False

    except requests.exceptions.Timeout:
        logger.error(f'❌ Timeout logging recognition to {url}')
        return False
    except requests.exceptions.ConnectionError:
        logger.error(f'❌ Connection error logging recognition to {url}')
        return False
    except requests.exceptions.RequestException as e:
        logger.error(f'❌ Error logging recognition: {e}')
        return False

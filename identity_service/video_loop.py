"""
Main video processing loop.

Orchestrates the recognition pipeline:
- HTTP API server
- Camera connection
- Periodic recognition passes
"""

import time
import threading
from typing import Optional
from .config import Config
from .logging_config import get_logger
from .camera import connect_camera, reconnect_camera
from .errors import SessionNotReadyError
from .session import RecognitionSession
from .app import create_app

logger = get_logger(__name__)

MAX_FAILURES = 10


def start_api_server(session: RecognitionSession, config: Config) -> None:
    """
    Start Flask server (blocking, meant for a background thread).

    Args:
        session: Recognition session served by the API
        config: Service configuration
    """
    logger.info(f'Starting API server on port {config.api_port}...')
    app = create_app(session, config)
    app.run(
        host='0.0.0.0',
        port=config.api_port,
        threaded=True,
        debug=False,
        use_reloader=False
    )


def run(
    session: RecognitionSession,
    config: Config,
    stop_flag: Optional[threading.Event] = None
) -> None:
    """
    Main video processing loop.

    Runs one recognition pass every config.recognition_interval seconds
    until stop_flag is set.

    Args:
        session: Loaded recognition session
        config: Service configuration
        stop_flag: Optional threading.Event to signal graceful shutdown
    """
    if not session.is_ready:
        session.load()

    if len(session.registry) == 0:
        logger.warning('No identities registered yet, recognition will not match anyone')

    api_thread = threading.Thread(target=start_api_server, args=(session, config), daemon=True)
    api_thread.start()
    logger.info(f'API: http://localhost:{config.api_port}/health')

    video_capture = connect_camera(config)

    consecutive_failures = 0
    last_pass = 0.0

    logger.info('🎬 Starting main loop...')

    try:
        while True:
            if stop_flag and stop_flag.is_set():
                logger.info('Stop signal received, exiting gracefully...')
                break

            ret, frame = video_capture.read()

            if not ret or frame is None:
                consecutive_failures += 1
                logger.warning(f'Failed to read frame ({consecutive_failures}/{MAX_FAILURES})')

                if consecutive_failures >= MAX_FAILURES:
                    video_capture = reconnect_camera(video_capture, config)
                    consecutive_failures = 0
                else:
                    time.sleep(0.5)
                continue

            consecutive_failures = 0

            now = time.time()
            if now - last_pass >= config.recognition_interval:
                last_pass = now
                try:
                    session.process_frame(frame)
                except SessionNotReadyError:
                    logger.debug('Session reloading, frame skipped')
                except Exception as e:
                    logger.error(f'Recognition pass failed: {e}')

            time.sleep(0.05)

    finally:
        video_capture.release()
        logger.info('Camera released')

"""
Identity Service - Main Entry Point

Face recognition with name autocomplete. Subcommands:
- serve: camera recognition loop plus HTTP API
- register: capture a face from the camera and register it
- search: print names matching a prefix
- delete: remove a registered identity
"""

import os
import sys
import argparse
from pathlib import Path
from .config import load_config
from .errors import DuplicateNameError, FaceQualityError, IdentityServiceError
from .identities import IdentityStore
from .logging_config import setup_logging, get_logger
from .recognition.quality import quality_feedback
from .session import RecognitionSession

logger = get_logger(__name__)


def _load_local_env() -> None:
    """Load environment variables from identity_service/.env if present."""
    env_path = Path(__file__).resolve().parent / '.env'
    if not env_path.exists():
        return

    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        os.environ.setdefault(key.strip(), value.strip())


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Identity Service - Face Recognition and Name Search'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command')

    subparsers.add_parser('serve', help='Run recognition loop and HTTP API (default)')

    register_parser = subparsers.add_parser('register', help='Register a face from the camera')
    register_parser.add_argument('--name', required=True, help='Name to register')

    search_parser = subparsers.add_parser('search', help='Search registered names by prefix')
    search_parser.add_argument('prefix', nargs='?', default='', help='Name prefix')

    delete_parser = subparsers.add_parser('delete', help='Delete a registered identity')
    delete_parser.add_argument('name', help='Name to delete')

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = 'serve'

    return args


def _register(session: RecognitionSession, name: str) -> int:
    from .camera import connect_camera, frame_grabber

    video_capture = connect_camera(session.config)
    try:
        try:
            samples = session.capture_registration_samples(frame_grabber(video_capture))
        except FaceQualityError as e:
            logger.error(f'Improve face quality: {quality_feedback(e.quality)}')
            return 1

        if not samples:
            logger.error('Face not detected. Please try again.')
            return 1

        try:
            session.register(name, samples)
        except DuplicateNameError:
            logger.error(f'Name already exists: {name}')
            return 1
    finally:
        video_capture.release()

    logger.info(f'✅ {name} registered with {len(samples)} samples')
    return 0


def main(argv=None) -> None:
    """Main entry point."""
    _load_local_env()
    args = parse_args(argv)
    config = load_config()

    setup_logging(config.service_name, args.debug or config.debug_mode)
    logger = get_logger(__name__)

    from .face_app import FaceEmbedder

    session = RecognitionSession(FaceEmbedder(config), IdentityStore(config), config)

    try:
        session.load()

        if args.command == 'search':
            for name in session.search(args.prefix):
                print(name)
            sys.exit(0)

        if args.command == 'delete':
            if not session.delete(args.name):
                logger.error(f'Unknown identity: {args.name}')
                sys.exit(1)
            sys.exit(0)

        if args.command == 'register':
            sys.exit(_register(session, args.name))

        logger.info('=' * 60)
        logger.info('Identity Service')
        logger.info('=' * 60)
        logger.info(f'Backend: {config.backend_url}')
        logger.info(f'Camera: {config.camera_source}')
        logger.info(f'Match threshold: {config.match_threshold}')
        logger.info('=' * 60)

        from .video_loop import run
        run(session, config)

    except KeyboardInterrupt:
        logger.info('Received keyboard interrupt, shutting down...')
        sys.exit(0)
    except IdentityServiceError as e:
        logger.error(f'{e}')
        sys.exit(1)
    except Exception as e:
        logger.error(f'Fatal error: {e}', exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()

"""
Attendance Service - Main Entry Point

Single-station attendance service: opens the webcam, loads face models
and serves the attendance API.
"""

import os
import sys
import argparse
from dataclasses import replace
from pathlib import Path
from .app import create_app
from .camera import open_webcam
from .config import Config, load_config
from .face_app import initialize_face_analyzer
from .logging_config import setup_logging, get_logger
from .storage import LocalStore
from .system import AttendanceSystem

logger = get_logger(__name__)


def _load_local_env() -> None:
    """Load environment variables from attendance_service/.env if present."""
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
        description='Attendance Service - Face Recognition Attendance Station'
    )

    parser.add_argument(
        '--port',
        type=int,
        help='HTTP port (or set HTTP_PORT)'
    )

    parser.add_argument(
        '--camera',
        type=int,
        help='Webcam index (or set CAMERA_INDEX)'
    )

    parser.add_argument(
        '--store',
        type=str,
        help='Path to the local JSON store (or set STORE_FILE)'
    )

    parser.add_argument(
        '--demo',
        action='store_true',
        help='Run without face models (random descriptors)'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Override configuration with command line arguments."""
    overrides = {}
    if args.port is not None:
        overrides['http_port'] = args.port
    if args.camera is not None:
        overrides['camera_index'] = args.camera
    if args.store:
        overrides['store_file'] = args.store
    if args.demo:
        overrides['demo_mode'] = True
    if args.debug:
        overrides['debug_mode'] = True
    return replace(config, **overrides)


def build_system(config: Config) -> AttendanceSystem:
    """Create the store, analyzer and webcam, and wire them together."""
    store = LocalStore(config.store_file)
    analyzer = initialize_face_analyzer(config)
    webcam = open_webcam(config)

    system = AttendanceSystem(config, store, analyzer, webcam)

    if not analyzer.models_loaded:
        system.status.update('Using simplified mode (face models not loaded)', 'warning')
    if webcam is None:
        system.status.update('Webcam not available. Using manual mode.', 'error')
    else:
        system.start_preview()

    system.status.update('System ready. Start by registering students.', 'info')
    return system


def main() -> None:
    """Main entry point."""
    _load_local_env()
    args = parse_args()

    try:
        config = apply_args(load_config(), args)
    except ValueError as e:
        print(f'Invalid configuration: {e}', file=sys.stderr)
        sys.exit(2)

    setup_logging(config.station_id, config.debug_mode)
    logger = get_logger(__name__)

    logger.info('=' * 60)
    logger.info('🚀 Smart Attendance Service')
    logger.info('=' * 60)
    logger.info(f'Store: {config.store_file}')
    logger.info(f'Match threshold: {config.match_threshold}')
    logger.info(f'Recognition interval: {config.recognition_interval_seconds}s')
    logger.info('=' * 60)

    system = build_system(config)
    app = create_app(system)

    logger.info(f'API: http://{config.http_host}:{config.http_port}/api/status')
    logger.info(f'Video stream: http://{config.http_host}:{config.http_port}/video_feed')

    try:
        app.run(
            host=config.http_host,
            port=config.http_port,
            threaded=True,
            debug=False,
            use_reloader=False
        )
    except KeyboardInterrupt:
        logger.info('Received keyboard interrupt, shutting down...')
    except Exception as e:
        logger.error(f'Fatal error: {e}', exc_info=True)
        sys.exit(1)
    finally:
        system.shutdown()


if __name__ == '__main__':
    main()

"""
Command-line entry point for ROM Depot
"""

import argparse
import sys

from .monitor import monitor_action, setup_runtime_monitor
from .settings import load_settings
from .shared_config import DEFAULT_SETTINGS_PATH


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog='romdepot',
        description='ROM Depot - upload, identify, list and delete ROM files over HTTP',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s
  %(prog)s --port 8080 --upload-dir /srv/roms
  %(prog)s --settings ./romdepot.json --debug

Environment:
  PORT, ROMDEPOT_HOST, ROMDEPOT_PORT, ROMDEPOT_UPLOAD_DIR,
  ROMDEPOT_LOGS_DIR, ROMDEPOT_MAX_UPLOAD_BYTES
        '''
    )

    parser.add_argument('--host', type=str, help='Interface to bind (default: 127.0.0.1)')
    parser.add_argument('--port', '-p', type=int, help='Port to listen on (default: 3000)')
    parser.add_argument('--upload-dir', '-u', type=str, help='Directory uploaded ROMs are stored in')
    parser.add_argument('--logs-dir', type=str, help='Directory for runtime logs')
    parser.add_argument(
        '--settings',
        type=str,
        default=DEFAULT_SETTINGS_PATH,
        help=f'JSON settings file (default: {DEFAULT_SETTINGS_PATH})'
    )
    parser.add_argument('--debug', action='store_true', help='Run Flask in debug mode')

    return parser


def run_cli(argv=None) -> int:
    """Parse arguments and start the server. Returns an exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    overrides = {}
    if args.upload_dir:
        overrides['upload_dir'] = args.upload_dir
    if args.logs_dir:
        overrides['logs_dir'] = args.logs_dir

    settings = load_settings(args.settings)
    logger = setup_runtime_monitor(logs_dir=overrides.get('logs_dir', settings.get('logs_dir')))
    monitor_action('mode selected: web', logger=logger)

    try:
        from .web import run_server
    except ImportError as e:
        logger.error("Flask is required for the web server: %s", e)
        print("Error: Flask is required for the web server")
        print("Install it with: pip install flask")
        return 1

    run_server(args.host, args.port, debug=args.debug,
               overrides=overrides, settings_path=args.settings)
    return 0


def main():
    sys.exit(run_cli())

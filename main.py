#!/usr/bin/env python3
"""
ROM Depot
Upload, identify, list and delete ROM files over HTTP.

Usage:
    python main.py                       (serve on 127.0.0.1:3000)
    python main.py --port 8080
    python main.py --upload-dir /srv/roms

For help: python main.py --help
"""

import sys

from romdepot.cli import run_cli


def main():
    """Main entry point"""
    sys.exit(run_cli())


if __name__ == '__main__':
    main()

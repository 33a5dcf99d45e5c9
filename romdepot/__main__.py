"""
Entry point for running as module: python -m romdepot
"""

from .cli import main

if __name__ == '__main__':
    main()

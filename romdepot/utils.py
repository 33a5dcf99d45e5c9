"""
Utility functions for ROM Depot
"""

import base64


def format_size(size_bytes: int) -> str:
    """Human-readable size, e.g. ``10.0 MB``."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            if unit == 'B':
                return f"{size_bytes} {unit}"
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


def to_base64_text(data: bytes) -> str:
    """Encode raw bytes as ASCII base64 for a JSON payload."""
    return base64.b64encode(data).decode('ascii')

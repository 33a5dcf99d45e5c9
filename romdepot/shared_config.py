"""
Shared configuration for ROM Depot.
Constants used by the upload filter, the catalog and the settings defaults.
"""

import os

# Extensions accepted by the upload filter (compared lower-case)
ALLOWED_EXTENSIONS = (
    '.nes', '.gb', '.gbc', '.gba', '.smc', '.sfc',
    '.md', '.gen', '.a26', '.bin', '.zip',
)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB per file

# Extra request bytes allowed on top of MAX_UPLOAD_BYTES for the multipart envelope
MULTIPART_OVERHEAD_BYTES = 64 * 1024

UPLOAD_FIELD = 'rom'

# In-flight uploads are written under this prefix and renamed into place
TEMP_PREFIX = '.tmp-'
INDEX_FILENAME = '.romdepot_index.json'

COPY_CHUNK_SIZE = 64 * 1024

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 3000

# Paths are relative to the working directory, like the uploads/ folder itself
UPLOAD_DIR = 'uploads'
LOGS_DIR = 'logs'
DEFAULT_SETTINGS_PATH = os.path.expanduser('~/.romdepot/settings.json')

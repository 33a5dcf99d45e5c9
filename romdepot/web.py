"""
Web API for ROM Depot using Flask.
Upload, list, load and delete ROM files kept in a single upload directory.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import ClientDisconnected, HTTPException, RequestEntityTooLarge

from .catalog import CatalogService
from .errors import MissingFieldError, RomDepotError, ValidationError
from .monitor import monitor_action, setup_runtime_monitor
from .settings import build_upload_constraint, load_settings, merge_settings
from .shared_config import MULTIPART_OVERHEAD_BYTES, UPLOAD_FIELD
from .storage import StoragePathResolver
from .upload_filter import UploadFilter
from .uploads import UploadHandler
from .utils import format_size

logger = logging.getLogger("romdepot")

# Flask app
app = Flask(__name__)

# Services are rebuilt by create_app(); they hold configuration only
state: Dict[str, Any] = {
    'settings': {},
    'resolver': None,
    'filter': None,
    'catalog': None,
    'uploads': None,
}


def create_app(settings: Optional[Dict[str, Any]] = None, settings_path: Optional[str] = None) -> Flask:
    """(Re)build the services from settings and apply the request size limit.

    ``settings`` is a partial dict merged over the loaded settings.
    """
    if settings_path is None:
        loaded = load_settings()
    else:
        loaded = load_settings(settings_path)
    settings = merge_settings(loaded, settings)

    resolver = StoragePathResolver(settings['upload_dir'])
    upload_filter = UploadFilter(build_upload_constraint(settings))

    state['settings'] = settings
    state['resolver'] = resolver
    state['filter'] = upload_filter
    state['catalog'] = CatalogService(resolver)
    state['uploads'] = UploadHandler(resolver, upload_filter)

    # The per-file limit is enforced while streaming; this only bounds the whole request.
    app.config['MAX_CONTENT_LENGTH'] = upload_filter.max_size_bytes + MULTIPART_OVERHEAD_BYTES
    return app


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


# ── Error handlers ─────────────────────────────────────────────

@app.errorhandler(RomDepotError)
def handle_depot_error(e: RomDepotError):
    return _error(e.message, e.status_code)


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(e):
    limit = state['filter'].max_size_bytes
    logger.info("Rejected request to %s: body exceeds %s", request.path, format_size(limit))
    return _error(f'File too large. Maximum size is {format_size(limit)}.', 413)


@app.errorhandler(ClientDisconnected)
def handle_disconnect(e):
    logger.info("Client disconnected during %s %s", request.method, request.path)
    return _error('Client disconnected before the upload finished', 400)


@app.errorhandler(HTTPException)
def handle_http_error(e: HTTPException):
    return _error(e.description or e.name, e.code or 500)


@app.errorhandler(Exception)
def handle_unexpected(e: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return _error(str(e) or type(e).__name__, 500)


# ── API Routes ─────────────────────────────────────────────────

@app.route('/api/upload', methods=['POST'])
def upload_rom():
    files = request.files.getlist(UPLOAD_FIELD)
    if len(files) > 1:
        raise ValidationError('Only one file may be uploaded per request')
    rom = files[0] if files else None
    result = state['uploads'].handle(rom)
    return jsonify(result)


@app.route('/api/load-rom', methods=['POST'])
def load_rom():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    filename = data.get('filename')

    if not filename:
        raise MissingFieldError('Filename required')

    rom_data = state['catalog'].load_base64(filename)
    monitor_action(f"rom loaded: {filename}")
    return jsonify({
        'success': True,
        'romData': rom_data,
        'filename': filename,
    })


@app.route('/api/roms')
def list_roms():
    roms = [entry.to_dict() for entry in state['catalog'].list_roms()]
    return jsonify({'success': True, 'roms': roms})


@app.route('/api/roms/<filename>', methods=['GET'])
def get_rom(filename):
    entry = state['catalog'].get(filename)
    return jsonify({'success': True, 'rom': entry.to_dict()})


@app.route('/api/roms/<filename>', methods=['DELETE'])
def delete_rom(filename):
    state['catalog'].delete(filename)
    return jsonify({'success': True, 'message': 'ROM deleted successfully'})


@app.route('/api/config')
def get_config():
    payload = state['filter'].constraint.to_dict()
    payload['success'] = True
    return jsonify(payload)


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False,
               overrides: Optional[Dict[str, Any]] = None, settings_path: Optional[str] = None):
    """Run the web server"""
    create_app(overrides, settings_path)
    settings = state['settings']
    host = host or settings['host']
    port = port or settings['port']

    logger = setup_runtime_monitor(logs_dir=settings.get('logs_dir'))
    monitor_action(f"run_server called: host={host} port={port} debug={debug}", logger=logger)
    logger.info("Upload directory: %s", state['resolver'].root)
    logger.info("Server running on http://%s:%s", host, port)
    app.run(host=host, port=port, debug=debug, threaded=True)


create_app()

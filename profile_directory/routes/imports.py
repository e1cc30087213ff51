"""
Import routes: dump upload + import run history.
"""
import logging
from flask import Blueprint, request, jsonify

from profile_directory.imports.base import ImportInputError
from profile_directory.imports.orchestrator import import_dump
from profile_directory.services.db import list_import_runs, get_import_run

logger = logging.getLogger(__name__)

bp = Blueprint('imports', __name__)


@bp.route('/upload-file', methods=['POST'])
def upload_file():
    """Import a tagged-text account dump (multipart field "file")."""
    upload = request.files.get('file')
    if upload is None:
        return jsonify({'error': 'Файл не найден'}), 400

    try:
        data = upload.read()
        result = import_dump(data, filename=upload.filename or None)
        return jsonify(result.to_dict())
    except ImportInputError as e:
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    except Exception as e:
        logger.error("Import of %s failed", upload.filename, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500


@bp.route('/api/imports')
def list_imports():
    """Recent import runs, newest first."""
    limit = request.args.get('limit', 20, type=int)
    try:
        return jsonify(list_import_runs(limit=max(1, min(limit, 100))))
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@bp.route('/api/imports/<run_id>')
def get_import(run_id):
    """One import run with its per-record errors."""
    run = get_import_run(run_id)
    if not run:
        return jsonify({'error': 'Import run not found'}), 404
    return jsonify(run)

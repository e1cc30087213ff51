"""
Page section routes: editable site pages made of ordered content blocks.

A page's images live in storage under <PAGES_STORAGE_DIR>/<page_name>/ and
are replaced wholesale on every save.
"""
import json
import logging
import os
import posixpath
import tempfile

from flask import Blueprint, request, jsonify
from werkzeug.utils import secure_filename

from profile_directory import config
from profile_directory.database import get_session
from profile_directory.extensions import get_storage
from profile_directory.models.section import Section
from profile_directory.services.media import is_image

logger = logging.getLogger(__name__)

bp = Blueprint('sections', __name__)


def _page_folder(page_name):
    return posixpath.join(config.PAGES_STORAGE_DIR, page_name)


def _clean_page_name(raw):
    """Page name usable as a single storage folder, else None."""
    name = (raw or '').strip()
    if not name or name in ('.', '..') or '/' in name or '\\' in name:
        return None
    return name


def _optional_int(value):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return int(value)


def parse_sections(raw):
    """
    JSON list of {section_order, layout_id, content} → list of dicts with
    integer order/layout. Raises ValueError on anything malformed.
    """
    items = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(items, list):
        raise ValueError("sections must be a JSON array")
    parsed = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"section #{position} is not an object")
        order = _optional_int(item.get('section_order'))
        parsed.append({
            'section_order': position if order is None else order,
            'layout_id': _optional_int(item.get('layout_id')),
            'content': item.get('content'),
        })
    return parsed


@bp.route('/save-sections', methods=['POST'])
def save_sections():
    """Replace a page's sections and its image folder in one go."""
    page_name = _clean_page_name(request.form.get('page_name'))
    if page_name is None:
        return jsonify({'error': 'Необходимо указать page_name'}), 400
    try:
        sections = parse_sections(request.form.get('sections') or '[]')
    except (ValueError, TypeError) as e:
        return jsonify({'error': 'Неверный формат sections', 'message': str(e)}), 400

    storage = get_storage()
    folder = _page_folder(page_name)
    session = get_session()
    temp_paths = []
    try:
        session.query(Section).filter(Section.page_name == page_name).delete(synchronize_session=False)
        session.add_all([Section(page_name=page_name, **s) for s in sections])
        session.flush()

        storage.delete_directory(folder)
        storage.create_directory(folder)
        for f in request.files.getlist('files'):
            name = secure_filename(f.filename or '')
            if not name:
                continue
            fd, path = tempfile.mkstemp(suffix=os.path.splitext(name)[1])
            os.close(fd)
            f.save(path)
            temp_paths.append(path)
            storage.upload_file(path, folder, name)

        session.commit()
        logger.info("Saved %d section(s) for page %s", len(sections), page_name)
        return jsonify({'message': 'Секции успешно сохранены!'})
    except Exception as e:
        session.rollback()
        logger.error("Saving sections for page %s failed", page_name, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()
        for path in temp_paths:
            try:
                os.remove(path)
            except OSError:
                logger.debug("Temp file %s already gone", path)


@bp.route('/sections')
def get_sections():
    page_name = _clean_page_name(request.args.get('page_name'))
    if page_name is None:
        return jsonify({'message': 'Необходимо указать page_name'}), 400

    session = get_session()
    try:
        sections = (
            session.query(Section)
            .filter(Section.page_name == page_name)
            .order_by(Section.section_order, Section.id)
            .all()
        )
        if not sections:
            return jsonify({'message': 'Секции не найдены'}), 404
        payload = [s.to_dict() for s in sections]
    except Exception as e:
        logger.error("Section lookup failed for page %s", page_name, exc_info=True)
        return jsonify({'error': 'Server error', 'message': str(e)}), 500
    finally:
        session.close()

    storage = get_storage()
    folder = _page_folder(page_name)
    try:
        images = [storage.public_path(folder, name) for name in storage.list_files(folder) if is_image(name)]
    except Exception as e:
        logger.warning("Could not list images for page %s: %s", page_name, e)
        images = []
    return jsonify({'sections': payload, 'images': images})

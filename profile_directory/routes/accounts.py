"""
Account routes: public listing/detail + admin edits and media management.
"""
import io
import json
import logging
import os
import tempfile
from datetime import date

from flask import Blueprint, request, jsonify, send_file

from profile_directory import is_admin_request
from profile_directory.database import get_session
from profile_directory.extensions import get_storage
from profile_directory.models.account import Account
from profile_directory.services import accounts as account_service
from profile_directory.services.media import (
    account_files, first_photo, sync_account_media, validate_image,
)

logger = logging.getLogger(__name__)

bp = Blueprint('accounts', __name__)

_PHOTO_MIMETYPES = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'GIF': 'image/gif',
    'WEBP': 'image/webp',
}


def _int_id(value):
    """Positive integer id from a JSON body value, else None."""
    if isinstance(value, bool):
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _photo_url(account):
    """Stored photo endpoint if the row has one, else first image in storage."""
    if account.photo is not None:
        return f'/account-photo/{account.id}'
    return first_photo(get_storage(), account.identificator)


# ── Public ───────────────────────────────────────────────────────────────────

@bp.route('/accounts')
def list_accounts():
    """Filtered account list. See services.accounts.search_accounts."""
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 40, type=int)
    city_id = request.args.get('city_id', type=int)
    tag_id = request.args.get('tag_id', type=int)
    search = request.args.get('search')
    # Moderators may ask for unpublished accounts too
    include_unpublished = (
        request.args.get('include_unpublished', '').lower() in ('1', 'true')
        and is_admin_request()
    )

    date_range = (None, None)
    raw_range = request.args.get('date_range')
    if raw_range:
        try:
            date_range = account_service.parse_date_range(json.loads(raw_range))
        except ValueError:
            return jsonify({'error': 'Invalid date_range format. It should be a JSON array.'}), 400

    session = get_session()
    try:
        accounts = account_service.search_accounts(
            session, search=search, city_id=city_id, tag_id=tag_id,
            date_range=date_range, page=page, limit=limit,
            include_unpublished=include_unpublished,
        )
        items = []
        for account in accounts:
            item = account.to_dict()
            item['photo'] = _photo_url(account)
            items.append(item)
        return jsonify(items)
    except Exception as e:
        logger.error("Account listing failed", exc_info=True)
        return jsonify({'error': 'Server error', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/account')
def account_detail():
    """Full account card: city, tags, socials, ratings, comments, media."""
    account_id = request.args.get('id', type=int)
    if account_id is None:
        return jsonify({'message': 'Пользователь не найден'}), 400

    session = get_session()
    try:
        detail = account_service.get_account_detail(session, account_id)
        if detail is None:
            return jsonify({'message': 'Пользователь не найден'}), 400
        if detail['account']['date_of_create'] is None and not is_admin_request():
            return jsonify({'message': 'Пользователь не найден'}), 400
        identificator = detail['account']['identificator']
        try:
            detail['files'] = account_files(get_storage(), identificator)
        except Exception as e:
            logger.warning("Could not list media for %s: %s", identificator, e)
            detail['files'] = []
        return jsonify(detail)
    except Exception as e:
        logger.error("Account detail failed for %s", account_id, exc_info=True)
        return jsonify({'error': 'Server error', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/account-photo/<int:account_id>')
def account_photo(account_id):
    """Raw bytes of the photo stored on the account row."""
    session = get_session()
    try:
        account = session.get(Account, account_id)
        if account is None or account.photo is None:
            return jsonify({'error': 'Фото не найдено'}), 404
        data = bytes(account.photo)
    finally:
        session.close()

    try:
        mimetype = _PHOTO_MIMETYPES.get(validate_image(data), 'application/octet-stream')
    except ValueError:
        mimetype = 'application/octet-stream'
    return send_file(io.BytesIO(data), mimetype=mimetype)


# ── Admin edits ──────────────────────────────────────────────────────────────

@bp.route('/update-account', methods=['PUT'])
def update_account():
    """Rename, move to another city, and/or replace the tag set."""
    data = request.get_json(silent=True) or {}
    account_id = _int_id(data.get('id'))
    if not account_id:
        return jsonify({'error': 'ID аккаунта обязателен'}), 400

    session = get_session()
    try:
        found = account_service.update_account(
            session, account_id,
            name=data.get('name'),
            city=data.get('city'),
            tags=data.get('tags'),
        )
        if not found:
            return jsonify({'error': 'Аккаунт не найден'}), 404
        return jsonify({'message': 'Аккаунт успешно обновлен'})
    except Exception as e:
        logger.error("Account %s update failed", account_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/update-account-date', methods=['POST'])
def update_account_date():
    """Set date_of_create; a non-null date publishes the account."""
    data = request.get_json(silent=True) or {}
    account_id = _int_id(data.get('id'))
    raw_date = data.get('new_date_of_create')
    if not account_id:
        return jsonify({'error': 'ID аккаунта обязателен'}), 400

    try:
        new_date = date.fromisoformat(raw_date[:10]) if raw_date else None
    except (TypeError, ValueError):
        return jsonify({'error': 'Неверный формат даты'}), 400

    session = get_session()
    try:
        account = account_service.set_create_date(session, account_id, new_date)
        if account is None:
            return jsonify({'error': 'Аккаунт не найден'}), 404
        return jsonify(account.to_dict())
    except Exception as e:
        session.rollback()
        logger.error("Date update failed for account %s", account_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/update-photo', methods=['POST'])
def update_photo():
    """Store an uploaded image (multipart "photo") on the account row."""
    account_id = request.form.get('id', type=int)
    upload = request.files.get('photo')
    if account_id is None or upload is None:
        return jsonify({'error': 'Нужны id и photo'}), 400

    data = upload.read()
    try:
        validate_image(data)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    session = get_session()
    try:
        account = session.get(Account, account_id)
        if account is None:
            return jsonify({'error': 'Аккаунт не найден'}), 404
        account.photo = data
        session.commit()
        return jsonify({'message': 'Фото успешно обновлено', 'result': {'photo': f'/account-photo/{account_id}'}})
    except Exception as e:
        session.rollback()
        logger.error("Photo update failed for account %s", account_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/delete-account', methods=['DELETE'])
def delete_account():
    """Delete an account, its associations and its media folder."""
    data = request.get_json(silent=True) or {}
    account_id = _int_id(data.get('account_id'))
    if not account_id:
        return jsonify({'error': 'account_id обязателен'}), 400

    session = get_session()
    try:
        identificator = account_service.delete_account(session, account_id)
    except Exception as e:
        logger.error("Account %s delete failed", account_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()

    if identificator is None:
        return jsonify({'error': 'Аккаунт не найден'}), 404

    try:
        get_storage().delete_directory(identificator)
    except Exception as e:
        logger.warning("Media folder for %s not removed: %s", identificator, e)

    return jsonify({'message': 'Аккаунт и его файлы успешно удалены'})


@bp.route('/account-edit-media', methods=['POST'])
def account_edit_media():
    """
    Replace an account's media set.

    Form fields: files (new uploads), links (JSON list of existing public
    paths to keep). Everything else in the folder is deleted.
    """
    identificator = request.args.get('id')
    if not identificator:
        return jsonify({'success': False, 'message': 'Отсутствует id'}), 400

    keep_links = []
    if request.form.get('links'):
        try:
            keep_links = [l for l in json.loads(request.form['links']) if isinstance(l, str)]
        except (ValueError, TypeError):
            logger.warning("Ignoring malformed links for %s", identificator)

    temp_paths = []
    try:
        uploads = []
        for f in request.files.getlist('files'):
            ext = os.path.splitext(f.filename or '')[1].lower()
            fd, path = tempfile.mkstemp(suffix=ext)
            os.close(fd)
            f.save(path)
            temp_paths.append(path)
            uploads.append((path, f.filename or ''))

        files = sync_account_media(get_storage(), identificator, uploads, keep_links)
        return jsonify({'success': True, 'message': 'Файлы загружены', 'files': files})
    except Exception:
        logger.error("Media update failed for %s", identificator, exc_info=True)
        return jsonify({'success': False, 'message': 'Ошибка на сервере'}), 500
    finally:
        for path in temp_paths:
            try:
                os.remove(path)
            except OSError:
                logger.debug("Temp file %s already gone", path)

"""
User routes: profile lookup, avatars, and moderator role/delete actions.
"""
import io
import logging
from flask import Blueprint, request, jsonify, send_file

from profile_directory.database import get_session
from profile_directory.models.user import User
from profile_directory.services import users as user_service
from profile_directory.services.media import validate_image

logger = logging.getLogger(__name__)

bp = Blueprint('users', __name__)

_AVATAR_MIMETYPES = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'GIF': 'image/gif',
    'WEBP': 'image/webp',
}


@bp.route('/get-user')
def get_user():
    login = (request.args.get('login') or '').strip()
    if not login:
        return jsonify({'error': 'Логин обязателен'}), 400

    session = get_session()
    try:
        user = session.query(User).filter_by(login=login).first()
        if user is None:
            return jsonify({'error': 'Пользователь не найден'}), 404
        return jsonify(user.to_dict())
    finally:
        session.close()


@bp.route('/change-user-avatar', methods=['POST'])
def change_user_avatar():
    user_id = request.form.get('id', type=int)
    upload = request.files.get('photo')
    if user_id is None or upload is None:
        return jsonify({'error': 'Нужны id и photo'}), 400

    data = upload.read()
    try:
        validate_image(data)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    session = get_session()
    try:
        user = session.get(User, user_id)
        if user is None:
            return jsonify({'error': 'Пользователь не найден'}), 404
        user.avatar = data
        session.commit()
        return jsonify(user.to_dict())
    except Exception as e:
        session.rollback()
        logger.error("Avatar update failed for user %s", user_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/user-avatar/<int:user_id>')
def user_avatar(user_id):
    session = get_session()
    try:
        user = session.get(User, user_id)
        if user is None or user.avatar is None:
            return jsonify({'error': 'Аватар не найден'}), 404
        data = bytes(user.avatar)
    finally:
        session.close()

    try:
        mimetype = _AVATAR_MIMETYPES.get(validate_image(data), 'application/octet-stream')
    except ValueError:
        mimetype = 'application/octet-stream'
    return send_file(io.BytesIO(data), mimetype=mimetype)


# ── Moderator actions ────────────────────────────────────────────────────────

@bp.route('/add-role', methods=['POST'])
def add_role():
    """Set a user's role; role_name "user" takes any special role away."""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    role_name = (data.get('role_name') or '').strip()
    if not user_id or not role_name:
        return jsonify({'error': 'user_id и role_name обязательны'}), 400

    session = get_session()
    try:
        user, previous = user_service.set_role(session, user_id, role_name)
        if user is None:
            return jsonify({'error': 'Пользователь не найден'}), 404
        if role_name == user_service.PLAIN_ROLE:
            if previous == user_service.PLAIN_ROLE:
                return jsonify({'message': 'Роль уже отсутствует у пользователя.'})
            return jsonify({'message': 'Роль пользователя успешно удалена.'})
        return jsonify({'message': 'Роль успешно обновлена', 'data': user.to_dict()})
    except Exception as e:
        session.rollback()
        logger.error("Role change failed for user %s", user_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/delete-user', methods=['DELETE'])
def delete_user():
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id обязателен'}), 400

    session = get_session()
    try:
        deleted = user_service.delete_user(session, user_id)
        if deleted is None:
            return jsonify({'error': 'Пользователь не найден'}), 404
        return jsonify({'message': 'Пользователь успешно удалён', 'data': deleted})
    except Exception as e:
        logger.error("User %s delete failed", user_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()

"""
Message routes: direct messages between registered users.
"""
import logging
from flask import Blueprint, request, jsonify
from sqlalchemy import and_, or_
from sqlalchemy.orm import aliased

from profile_directory.database import get_session
from profile_directory.models.message import Message, HiddenMessage
from profile_directory.models.user import User

logger = logging.getLogger(__name__)

bp = Blueprint('messages', __name__)


@bp.route('/send-messages', methods=['POST'])
def send_message():
    data = request.get_json(silent=True) or {}
    text = (data.get('text_messages') or '').strip()
    user_from_id = data.get('user_from_id')
    user_to_login = (data.get('user_to_login') or '').strip()
    if not text or not user_from_id or not user_to_login:
        return jsonify({'error': 'Все поля обязательны'}), 400

    session = get_session()
    try:
        recipient = session.query(User).filter_by(login=user_to_login).first()
        if recipient is None:
            return jsonify({'error': 'Получатель не найден'}), 404
        message = Message(user_from_id=user_from_id, user_to_id=recipient.id, text=text)
        session.add(message)
        session.commit()
        return jsonify(message.to_dict()), 201
    except Exception as e:
        session.rollback()
        logger.error("Error sending message", exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/get-messages')
def list_messages():
    """A user's mailbox: sent and received, minus what they hid, newest first."""
    user_id = request.args.get('user_id', type=int)
    if not user_id:
        return jsonify({'error': 'user_id обязателен'}), 400

    session = get_session()
    try:
        sender = aliased(User)
        receiver = aliased(User)
        rows = (
            session.query(Message, sender.login, receiver.login)
            .join(sender, Message.user_from_id == sender.id)
            .join(receiver, Message.user_to_id == receiver.id)
            .outerjoin(HiddenMessage, and_(
                HiddenMessage.message_id == Message.id,
                HiddenMessage.user_id == user_id,
            ))
            .filter(or_(Message.user_to_id == user_id, Message.user_from_id == user_id))
            .filter(HiddenMessage.id.is_(None))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .all()
        )
        result = []
        for message, sender_login, receiver_login in rows:
            item = message.to_dict()
            result.append({
                'id': item['id'],
                'date_messages': item['date_messages'],
                'time_messages': item['time_messages'],
                'text_messages': item['text_messages'],
                'sender': sender_login,
                'receiver': receiver_login,
            })
        return jsonify(result)
    except Exception as e:
        logger.error("Message listing failed for user %s", user_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/delete-messages', methods=['DELETE'])
def hide_messages():
    """Hide messages from one user's mailbox; the other side still sees them."""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    message_ids = data.get('message_ids')
    if not user_id or not isinstance(message_ids, list) or not message_ids:
        return jsonify({'error': 'user_id и message_ids (массив) обязательны'}), 400
    if not all(isinstance(mid, int) and not isinstance(mid, bool) for mid in message_ids):
        return jsonify({'error': 'message_ids должны быть числами'}), 400

    wanted = list(dict.fromkeys(message_ids))

    session = get_session()
    try:
        # Only messages the user took part in can leave their mailbox
        visible = {
            mid for (mid,) in session.query(Message.id).filter(
                Message.id.in_(wanted),
                or_(Message.user_from_id == user_id, Message.user_to_id == user_id),
            ).all()
        }
        already = {
            mid for (mid,) in session.query(HiddenMessage.message_id).filter(
                HiddenMessage.user_id == user_id,
                HiddenMessage.message_id.in_(wanted),
            ).all()
        }
        new_ids = [mid for mid in wanted if mid in visible and mid not in already]
        if not new_ids:
            return jsonify({'error': 'Все сообщения уже скрыты'}), 400

        session.add_all([HiddenMessage(user_id=user_id, message_id=mid) for mid in new_ids])
        session.commit()
        return jsonify({'success': True, 'message': 'Сообщения скрыты', 'hidden_messages': new_ids})
    except Exception as e:
        session.rollback()
        logger.error("Error hiding messages for user %s", user_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()

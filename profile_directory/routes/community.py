"""
Community routes: comments, favorites and ratings left by registered users.
"""
import logging
from flask import Blueprint, request, jsonify
from sqlalchemy.orm import aliased

from profile_directory.database import get_session
from profile_directory.models.account import Account
from profile_directory.models.comment import Comment
from profile_directory.models.favorite import Favorite
from profile_directory.models.rating import Rating
from profile_directory.models.user import User
from profile_directory.services.community import delete_comments

logger = logging.getLogger(__name__)

bp = Blueprint('community', __name__)


# ── Comments ─────────────────────────────────────────────────────────────────

@bp.route('/comments')
def list_user_comments():
    """Every comment a user wrote, with the account and quoted parent."""
    user_id = request.args.get('user_id', type=int)
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400

    session = get_session()
    try:
        parent = aliased(Comment)
        parent_author = aliased(User)
        rows = (
            session.query(Comment, User.login, Account.name, parent_author.login, parent.text)
            .outerjoin(User, Comment.user_id == User.id)
            .outerjoin(Account, Comment.account_id == Account.id)
            .outerjoin(parent, Comment.parent_id == parent.id)
            .outerjoin(parent_author, parent.user_id == parent_author.id)
            .filter(Comment.user_id == user_id)
            .order_by(Comment.id)
            .all()
        )
        result = []
        for comment, author, account_name, quoted_author, quoted_text in rows:
            item = comment.to_dict()
            item.update({
                'author_nickname': author,
                'account_name': account_name,
                'quoted_author_nickname': quoted_author,
                'quoted_comment_text': quoted_text,
            })
            result.append(item)
        return jsonify(result)
    except Exception as e:
        logger.error("Comment listing failed for user %s", user_id, exc_info=True)
        return jsonify({'error': 'Server error', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/add-comment', methods=['POST'])
def add_comment():
    data = request.get_json(silent=True) or {}
    account_id = data.get('account_id')
    user_id = data.get('user_id')
    text = (data.get('text') or '').strip()
    if not account_id or not user_id or not text:
        return jsonify({'success': False, 'message': 'account_id, user_id и text обязательны'}), 400

    session = get_session()
    try:
        comment = Comment(
            account_id=account_id,
            user_id=user_id,
            text=text,
            parent_id=data.get('parent_id'),
        )
        session.add(comment)
        session.commit()
        return jsonify({'success': True, 'comment': comment.to_dict()}), 201
    except Exception:
        session.rollback()
        logger.error("Error adding comment", exc_info=True)
        return jsonify({'success': False, 'message': 'Error adding comment'}), 500
    finally:
        session.close()


@bp.route('/update-comment', methods=['PUT'])
def update_comment():
    data = request.get_json(silent=True) or {}
    comment_id = data.get('comment_id')
    text = (data.get('text') or '').strip()
    if not comment_id or not text:
        return jsonify({'success': False, 'message': 'comment_id и text обязательны'}), 400

    session = get_session()
    try:
        comment = session.get(Comment, comment_id)
        if comment is None:
            return jsonify({'success': False, 'message': 'Комментарий не найден'}), 404
        comment.text = text
        session.commit()
        return jsonify({'success': True, 'message': 'Комментарий обновлен', 'comment': comment.to_dict()})
    except Exception:
        session.rollback()
        logger.error("Error updating comment %s", comment_id, exc_info=True)
        return jsonify({'success': False, 'message': 'Ошибка при обновлении комментария'}), 500
    finally:
        session.close()


@bp.route('/delete-comment', methods=['DELETE'])
def delete_comment():
    """Delete a comment together with its replies and their reports."""
    data = request.get_json(silent=True) or {}
    comment_id = data.get('comment_id')

    session = get_session()
    try:
        comment = session.get(Comment, comment_id) if comment_id else None
        if comment is None:
            return jsonify({'success': False, 'message': 'Комментарий не найден'}), 404

        delete_comments(session, [comment.id])
        session.commit()
        return jsonify({'success': True, 'message': 'Комментарий удален'})
    except Exception:
        session.rollback()
        logger.error("Error deleting comment %s", comment_id, exc_info=True)
        return jsonify({'success': False, 'message': 'Ошибка при удалении комментария'}), 500
    finally:
        session.close()


# ── Favorites ────────────────────────────────────────────────────────────────

@bp.route('/favorites')
def list_favorites():
    users_id = request.args.get('users_id', type=int)
    if not users_id:
        return jsonify({'error': 'users_id обязательно'}), 400

    session = get_session()
    try:
        rows = (
            session.query(Account, Favorite.comment)
            .join(Favorite, Favorite.accounts_id == Account.id)
            .filter(Favorite.users_id == users_id)
            .order_by(Favorite.id)
            .all()
        )
        result = []
        for account, note in rows:
            item = account.to_dict()
            item['comment'] = note
            result.append(item)
        return jsonify(result)
    except Exception as e:
        logger.error("Favorites listing failed for user %s", users_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/add-favorite', methods=['POST'])
def add_favorite():
    data = request.get_json(silent=True) or {}
    accounts_id = data.get('accounts_id')
    users_id = data.get('users_id')
    if not accounts_id or not users_id:
        return jsonify({'error': 'accounts_id и users_id обязательны'}), 400

    session = get_session()
    try:
        existing = session.query(Favorite).filter_by(accounts_id=accounts_id, users_id=users_id).first()
        if existing:
            return jsonify({'error': 'Этот аккаунт уже в избранном'}), 409
        favorite = Favorite(accounts_id=accounts_id, users_id=users_id, comment=data.get('comment'))
        session.add(favorite)
        session.commit()
        return jsonify({
            'id': favorite.id,
            'accounts_id': favorite.accounts_id,
            'users_id': favorite.users_id,
            'comment': favorite.comment,
        }), 201
    except Exception:
        session.rollback()
        logger.error("Error adding favorite", exc_info=True)
        return jsonify({'error': 'Ошибка сервера'}), 500
    finally:
        session.close()


@bp.route('/delete-favorite', methods=['DELETE'])
def delete_favorite():
    data = request.get_json(silent=True) or {}
    accounts_id = data.get('accounts_id')
    users_id = data.get('users_id')
    if not accounts_id or not users_id:
        return jsonify({'error': 'accounts_id и users_id обязательны'}), 400

    session = get_session()
    try:
        removed = (
            session.query(Favorite)
            .filter_by(accounts_id=accounts_id, users_id=users_id)
            .delete(synchronize_session=False)
        )
        if not removed:
            return jsonify({'error': 'Запись в избранном не найдена'}), 404
        session.commit()
        return jsonify({'message': 'Удалено из избранного'})
    except Exception:
        session.rollback()
        logger.error("Error deleting favorite", exc_info=True)
        return jsonify({'error': 'Ошибка сервера'}), 500
    finally:
        session.close()


# ── Ratings ──────────────────────────────────────────────────────────────────

@bp.route('/set-rate', methods=['POST'])
def set_rate():
    """One rating per user per account; a second attempt is rejected."""
    data = request.get_json(silent=True) or {}
    account_id = data.get('account_id')
    users_id = data.get('users_id')
    rate = data.get('rate')
    if account_id is None or users_id is None or rate is None:
        return jsonify({'error': 'Все поля должны быть заполнены'}), 400
    try:
        rate = int(rate)
    except (TypeError, ValueError):
        return jsonify({'error': 'rate должен быть числом'}), 400

    session = get_session()
    try:
        if session.query(Rating).filter_by(account_id=account_id, users_id=users_id).first():
            return jsonify({'error': 'Вы уже оставили оценку этому аккаунту'}), 409
        session.add(Rating(account_id=account_id, users_id=users_id, rate=rate))
        session.commit()
        return jsonify({'message': 'Оценка успешно добавлена'})
    except Exception:
        session.rollback()
        logger.error("Error saving rating", exc_info=True)
        return jsonify({'error': 'Ошибка сервера'}), 500
    finally:
        session.close()


@bp.route('/check-rate', methods=['POST'])
def check_rate():
    data = request.get_json(silent=True) or {}
    account_id = data.get('account_id')
    users_id = data.get('users_id')
    if account_id is None or users_id is None:
        return jsonify({'error': 'account_id и users_id обязательны'}), 400

    session = get_session()
    try:
        rated = session.query(Rating).filter_by(account_id=account_id, users_id=users_id).first() is not None
        return jsonify({'rated': rated})
    finally:
        session.close()

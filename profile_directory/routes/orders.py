"""
Order routes: users file requests, moderators work through them.

Each moderator keeps a personal queue: hiding an order only removes it from
that moderator's /get-admin-orders view.
"""
import logging
from datetime import date, datetime, time, timedelta

from flask import Blueprint, request, jsonify
from sqlalchemy import and_

from profile_directory.database import get_session
from profile_directory.models.order import Order, HiddenOrder
from profile_directory.services.db import insert_ignore

logger = logging.getLogger(__name__)

bp = Blueprint('orders', __name__)


def _day_bounds(start_raw, end_raw):
    """
    (from, to) datetimes covering whole days start..end, or None when the
    range is not requested. Raises ValueError on malformed dates.
    """
    if not (start_raw and end_raw):
        return None
    start = date.fromisoformat(start_raw[:10])
    end = date.fromisoformat(end_raw[:10])
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def _with_range(query, bounds):
    if bounds:
        query = query.filter(Order.created_at >= bounds[0], Order.created_at < bounds[1])
    return query


@bp.route('/add-order', methods=['POST'])
def add_order():
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    text = (data.get('text') or '').strip()
    if not user_id or not text:
        return jsonify({'error': 'user_id и text обязательны'}), 400

    session = get_session()
    try:
        order = Order(user_id=user_id, text=text, type=data.get('type'), status=1)
        session.add(order)
        session.commit()
        return jsonify(order.to_dict()), 201
    except Exception as e:
        session.rollback()
        logger.error("Error adding order", exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/get-orders')
def list_orders():
    """Orders filtered by user, type and creation day range; newest first."""
    user_id = request.args.get('user_id', type=int)
    order_type = request.args.get('type')
    try:
        bounds = _day_bounds(request.args.get('start_date'), request.args.get('end_date'))
    except ValueError:
        return jsonify({'error': 'Неверный формат даты'}), 400

    session = get_session()
    try:
        query = session.query(Order)
        if user_id:
            query = query.filter(Order.user_id == user_id)
        if order_type:
            query = query.filter(Order.type == order_type)
        query = _with_range(query, bounds)
        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
        return jsonify([o.to_dict() for o in orders])
    except Exception as e:
        logger.error("Order listing failed", exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/get-admin-orders')
def list_admin_orders():
    """A moderator's queue: every order they have not hidden."""
    user_id = request.args.get('user_id', type=int)
    try:
        bounds = _day_bounds(request.args.get('start_date'), request.args.get('end_date'))
    except ValueError:
        return jsonify({'error': 'Неверный формат даты'}), 400

    session = get_session()
    try:
        query = session.query(Order)
        if user_id:
            query = (
                query.outerjoin(HiddenOrder, and_(
                    HiddenOrder.order_id == Order.id,
                    HiddenOrder.user_id == user_id,
                ))
                .filter(HiddenOrder.id.is_(None))
            )
        query = _with_range(query, bounds)
        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
        return jsonify([o.to_dict() for o in orders])
    except Exception as e:
        logger.error("Admin order listing failed for %s", user_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/update-orders', methods=['PUT'])
def update_order_status():
    data = request.get_json(silent=True) or {}
    order_id = data.get('id')
    status = data.get('status')
    if not order_id or status is None:
        return jsonify({'error': 'id и status обязательны'}), 400
    try:
        status = int(status)
    except (TypeError, ValueError):
        return jsonify({'error': 'status должен быть числом'}), 400

    session = get_session()
    try:
        order = session.get(Order, order_id)
        if order is None:
            return jsonify({'error': 'Запись не найдена'}), 404
        order.status = status
        session.commit()
        return jsonify({'message': 'Статус успешно обновлен', 'data': order.to_dict()})
    except Exception as e:
        session.rollback()
        logger.error("Status update failed for order %s", order_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()


@bp.route('/delete-orders', methods=['POST'])
def hide_order():
    """Remove an order from one moderator's queue. Repeating is harmless."""
    data = request.get_json(silent=True) or {}
    order_id = data.get('id')
    user_id = data.get('user_id')
    if not order_id or not user_id:
        return jsonify({'error': 'id и user_id обязательны'}), 400

    session = get_session()
    try:
        if session.get(Order, order_id) is None:
            return jsonify({'error': 'Запись не найдена'}), 404
        insert_ignore(session, HiddenOrder, {'user_id': user_id, 'order_id': order_id},
                      ('user_id', 'order_id'))
        session.commit()
        return jsonify({'message': 'Заказ скрыт'})
    except Exception as e:
        session.rollback()
        logger.error("Error hiding order %s", order_id, exc_info=True)
        return jsonify({'error': 'Ошибка сервера', 'message': str(e)}), 500
    finally:
        session.close()

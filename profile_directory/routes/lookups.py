"""
Lookup routes: cities and tags with usage counts for the filter sidebar.
"""
import logging
from flask import Blueprint, jsonify
from sqlalchemy import func

from profile_directory.database import get_session
from profile_directory.models.account import Account
from profile_directory.models.city import City
from profile_directory.models.tag import Tag, AccountTag

logger = logging.getLogger(__name__)

bp = Blueprint('lookups', __name__)


@bp.route('/cities')
def list_cities():
    """Cities that have at least one account, most populated first."""
    session = get_session()
    try:
        count = func.count(Account.id).label('account_count')
        rows = (
            session.query(City.id, City.name_ru, count)
            .join(Account, Account.city_id == City.id)
            .group_by(City.id, City.name_ru)
            .order_by(count.desc(), City.name_ru)
            .all()
        )
        return jsonify([
            {'city_id': city_id, 'city_name': name, 'account_count': n}
            for city_id, name, n in rows
        ])
    except Exception:
        logger.error("City listing failed", exc_info=True)
        return jsonify({'error': 'Server error'}), 500
    finally:
        session.close()


@bp.route('/tags')
def list_tags():
    """All tags with how many accounts use them, most used first."""
    session = get_session()
    try:
        count = func.count(AccountTag.tag_id).label('usage_count')
        rows = (
            session.query(Tag.id, Tag.name_ru, count)
            .outerjoin(AccountTag, AccountTag.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name_ru)
            .order_by(count.desc(), Tag.name_ru)
            .all()
        )
        return jsonify([
            {'id': tag_id, 'name_ru': name, 'usage_count': n}
            for tag_id, name, n in rows
        ])
    except Exception:
        logger.error("Tag listing failed", exc_info=True)
        return jsonify({'error': 'Server error'}), 500
    finally:
        session.close()

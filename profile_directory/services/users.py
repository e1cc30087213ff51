"""
User admin: role changes and deletion of a user with everything they own.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import or_, select

from profile_directory.models.comment import Comment
from profile_directory.models.favorite import Favorite
from profile_directory.models.message import Message, HiddenMessage
from profile_directory.models.order import Order, HiddenOrder
from profile_directory.models.rating import Rating
from profile_directory.models.report import Report
from profile_directory.models.user import User
from profile_directory.services.community import delete_comments

logger = logging.getLogger('services.users')

PLAIN_ROLE = 'user'


def set_role(session, user_id: int, role_name: str) -> Tuple[Optional[User], Optional[str]]:
    """
    Give a user a role; PLAIN_ROLE resets them to an ordinary user.
    Returns (user, previous_role), or (None, None) for an unknown user.
    """
    user = session.get(User, user_id)
    if user is None:
        return None, None
    previous = user.role
    user.role = role_name
    session.commit()
    if previous != role_name:
        logger.info("User %s role %s -> %s", user_id, previous, role_name)
    return user, previous


def delete_user(session, user_id: int) -> Optional[Dict[str, Any]]:
    """Delete a user and every row that belongs to them. Returns the deleted user's dict."""
    try:
        user = session.get(User, user_id)
        if user is None:
            return None
        data = user.to_dict()

        authored = [cid for (cid,) in session.query(Comment.id).filter(Comment.user_id == user_id).all()]
        removed_comments = delete_comments(session, authored)

        own_messages = select(Message.id).where(
            or_(Message.user_from_id == user_id, Message.user_to_id == user_id)
        )
        session.query(HiddenMessage).filter(or_(
            HiddenMessage.user_id == user_id,
            HiddenMessage.message_id.in_(own_messages),
        )).delete(synchronize_session=False)
        session.query(Message).filter(
            or_(Message.user_from_id == user_id, Message.user_to_id == user_id)
        ).delete(synchronize_session=False)

        own_orders = select(Order.id).where(Order.user_id == user_id)
        session.query(HiddenOrder).filter(or_(
            HiddenOrder.user_id == user_id,
            HiddenOrder.order_id.in_(own_orders),
        )).delete(synchronize_session=False)
        session.query(Order).filter(Order.user_id == user_id).delete(synchronize_session=False)

        session.query(Report).filter(or_(
            Report.reporter_user_id == user_id,
            Report.reported_user_id == user_id,
        )).delete(synchronize_session=False)
        session.query(Favorite).filter(Favorite.users_id == user_id).delete(synchronize_session=False)
        session.query(Rating).filter(Rating.users_id == user_id).delete(synchronize_session=False)

        session.delete(user)
        session.commit()
        logger.info("Deleted user %s with %d comment(s)", user_id, removed_comments)
        return data
    except Exception:
        session.rollback()
        raise

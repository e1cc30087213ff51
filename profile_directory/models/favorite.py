"""
Favorite model: a user's bookmarked accounts with an optional note.
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint

from profile_directory.database import Base


class Favorite(Base):
    __tablename__ = 'favorites'

    id = Column(Integer, primary_key=True, autoincrement=True)
    accounts_id = Column(Integer, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    users_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    comment = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('accounts_id', 'users_id', name='uq_favorites_account_user'),
    )

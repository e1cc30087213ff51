"""
Rating model: one score per (account, user).
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from profile_directory.database import Base


class Rating(Base):
    __tablename__ = 'rating'

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    users_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    rate = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('account_id', 'users_id', name='uq_rating_account_user'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'account_id': self.account_id,
            'users_id': self.users_id,
            'rate': self.rate,
        }

"""
Message model: direct messages between registered users.

Hiding is per participant: a HiddenMessage row removes the message from one
user's mailbox only.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from profile_directory.database import Base


class Message(Base):
    __tablename__ = 'messages'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_from_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    user_to_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'user_from_id': self.user_from_id,
            'user_to_id': self.user_to_id,
            'text_messages': self.text,
            'date_messages': self.created_at.strftime('%Y-%m-%d') if self.created_at else None,
            'time_messages': self.created_at.strftime('%H:%M:%S') if self.created_at else None,
        }


class HiddenMessage(Base):
    __tablename__ = 'messages_deleted'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    message_id = Column(Integer, ForeignKey('messages.id', ondelete='CASCADE'), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'message_id', name='uq_messages_deleted_user_message'),
    )

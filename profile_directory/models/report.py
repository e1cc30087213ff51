"""
Report model: a user's complaint about a comment. One per (comment, reporter).
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from profile_directory.database import Base


class Report(Base):
    __tablename__ = 'reports'

    id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(Integer, ForeignKey('comments.id', ondelete='CASCADE'), nullable=False)
    reported_user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reporter_user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('comment_id', 'reporter_user_id', name='uq_reports_comment_reporter'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'comment_id': self.comment_id,
            'reported_user_id': self.reported_user_id,
            'reporter_user_id': self.reporter_user_id,
            'text': self.text,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

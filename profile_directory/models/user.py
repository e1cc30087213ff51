"""
User model: registered site users who comment, rate, bookmark accounts,
message each other and file reports and orders.

Registration and login flows live outside this service; here users are
looked up, given roles, get avatars and can be deleted by a moderator.
"""
from sqlalchemy import Column, Integer, Text, LargeBinary, DateTime
from sqlalchemy.sql import func

from profile_directory.database import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    login = Column(Text, nullable=False, unique=True)
    email = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default='user')  # user / admin / moderator ...
    avatar = Column(LargeBinary, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'login': self.login,
            'email': self.email,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'has_avatar': self.avatar is not None,
        }

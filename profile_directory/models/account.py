"""
Account model: one row per directory profile, keyed by the dump identifier.
"""
from sqlalchemy import Column, Integer, Text, Boolean, Date, LargeBinary, ForeignKey

from profile_directory.database import Base


class Account(Base):
    __tablename__ = 'accounts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    identificator = Column(Text, nullable=False, unique=True)  # external id from the dump
    name = Column(Text, default='')
    city_id = Column(Integer, ForeignKey('city.id'), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    date_of_create = Column(Date, nullable=True)  # NULL = hidden until moderated
    check_video = Column(Boolean, nullable=False, default=False)
    photo = Column(LargeBinary, nullable=True)

    def to_dict(self, include_photo=False):
        data = {
            'id': self.id,
            'identificator': self.identificator,
            'name': self.name,
            'City_id': self.city_id,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'date_of_create': self.date_of_create.isoformat() if self.date_of_create else None,
            'check_video': bool(self.check_video),
        }
        if include_photo:
            data['has_photo'] = self.photo is not None
        return data

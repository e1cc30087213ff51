"""
City model: deduplicated by primary-locale name.
"""
from sqlalchemy import Column, Integer, Text, UniqueConstraint

from profile_directory.database import Base


class City(Base):
    __tablename__ = 'city'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name_ru = Column(Text, nullable=False)
    name_eu = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('name_ru', name='uq_city_name_ru'),
    )

    def to_dict(self):
        return {'id': self.id, 'name_ru': self.name_ru, 'name_eu': self.name_eu}

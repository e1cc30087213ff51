"""
Section model: ordered content blocks of an editable site page.
"""
from sqlalchemy import Column, Integer, Text, JSON

from profile_directory.database import Base


class Section(Base):
    __tablename__ = 'sections'

    id = Column(Integer, primary_key=True, autoincrement=True)
    page_name = Column(Text, nullable=False, index=True)
    section_order = Column(Integer, nullable=False, default=0)
    layout_id = Column(Integer, nullable=True)
    content = Column(JSON, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'page_name': self.page_name,
            'section_order': self.section_order,
            'layout_id': self.layout_id,
            'content': self.content,
        }

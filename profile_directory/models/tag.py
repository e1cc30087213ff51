"""
Tag model + AccountTag join rows (tags_detail).

Tags are created lazily by the importer and never deleted by it; only an
explicit account edit detaches them.
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint

from profile_directory.database import Base


class Tag(Base):
    __tablename__ = 'tags'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name_ru = Column(Text, nullable=False)
    name_eu = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('name_ru', name='uq_tags_name_ru'),
    )

    def to_dict(self):
        return {'id': self.id, 'name_ru': self.name_ru, 'name_eu': self.name_eu}


class AccountTag(Base):
    __tablename__ = 'tags_detail'

    id = Column(Integer, primary_key=True, autoincrement=True)
    tag_id = Column(Integer, ForeignKey('tags.id', ondelete='CASCADE'), nullable=False)
    account_id = Column(Integer, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)

    __table_args__ = (
        UniqueConstraint('tag_id', 'account_id', name='uq_tags_detail_tag_account'),
    )

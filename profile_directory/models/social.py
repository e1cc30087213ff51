"""
Social link models.

SocialType:    fixed set of networks, keyed by the dump tag name (fb, tg, ...)
Social:        one row per (type, handle), shared between accounts
AccountSocial: join rows (socials_detail)
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, UniqueConstraint

from profile_directory.database import Base


class SocialType(Base):
    __tablename__ = 'socials_type'

    id = Column(Integer, primary_key=True, autoincrement=True)
    identificator = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)


class Social(Base):
    __tablename__ = 'socials'

    id = Column(Integer, primary_key=True, autoincrement=True)
    type_social_id = Column(Integer, ForeignKey('socials_type.id'), nullable=False)
    text = Column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint('type_social_id', 'text', name='uq_socials_type_text'),
    )


class AccountSocial(Base):
    __tablename__ = 'socials_detail'

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    socials_id = Column(Integer, ForeignKey('socials.id', ondelete='CASCADE'), nullable=False)

    __table_args__ = (
        UniqueConstraint('account_id', 'socials_id', name='uq_socials_detail_account_social'),
    )

"""
Entity reconciliation: resolve a record's city, tags and social links to
rows, creating whatever is missing, and attach them to the account.

Every write goes through find_or_create()/insert_ignore(), so running the same
record twice leaves the database unchanged. Import only ever attaches; tags and
socials that disappeared from the dump stay linked until an explicit edit.
"""
import logging
from typing import Dict, List, Optional

from profile_directory.config import SOCIAL_TYPES
from profile_directory.models.city import City
from profile_directory.models.tag import Tag, AccountTag
from profile_directory.models.social import SocialType, Social, AccountSocial
from profile_directory.services.db import find_or_create, insert_ignore

logger = logging.getLogger('imports.reconciler')


def parse_tags(raw: Optional[str]) -> List[str]:
    """'a, b ,a,,' → ['a', 'b']"""
    if not raw:
        return []
    tokens = (t.strip() for t in raw.split(','))
    return list(dict.fromkeys(t for t in tokens if t))


def resolve_city(session, name: Optional[str]) -> Optional[int]:
    """City id for `name`, creating it (same text in both locales) if new."""
    name = (name or '').strip()
    if not name:
        return None
    city, created = find_or_create(session, City, defaults={'name_eu': name}, name_ru=name)
    if created:
        logger.info("Created city %r (id=%s)", name, city.id)
    return city.id


def resolve_tag(session, name: str) -> int:
    tag, created = find_or_create(session, Tag, defaults={'name_eu': name}, name_ru=name)
    if created:
        logger.info("Created tag %r (id=%s)", name, tag.id)
    return tag.id


def attach_tags(session, account_id: int, raw_tags: Optional[str]) -> List[int]:
    """Find-or-create each tag and link it to the account. Returns tag ids."""
    tag_ids = []
    for name in parse_tags(raw_tags):
        tag_id = resolve_tag(session, name)
        insert_ignore(
            session, AccountTag,
            {'tag_id': tag_id, 'account_id': account_id},
            ('tag_id', 'account_id'),
        )
        tag_ids.append(tag_id)
    return tag_ids


def social_type_ids(session) -> Dict[str, int]:
    """identificator → id for every configured social network type."""
    return {t.identificator: t.id for t in session.query(SocialType).all()}


def attach_socials(session, account_id: int, socials: Dict[str, List[str]],
                   type_ids: Dict[str, int] = None) -> List[int]:
    """
    Find-or-create Social rows per (type, handle) and link them to the account.

    Types missing from socials_type are skipped with a warning. Returns the
    social ids that are now linked.
    """
    if type_ids is None:
        type_ids = social_type_ids(session)

    social_ids = []
    for key in SOCIAL_TYPES:
        values = socials.get(key) or []
        if not values:
            continue
        type_id = type_ids.get(key)
        if type_id is None:
            logger.warning("Social type %r is not configured, skipping %d value(s)", key, len(values))
            continue
        for text in dict.fromkeys(v.strip() for v in values if v and v.strip()):
            social, _ = find_or_create(session, Social, type_social_id=type_id, text=text)
            insert_ignore(
                session, AccountSocial,
                {'account_id': account_id, 'socials_id': social.id},
                ('account_id', 'socials_id'),
            )
            social_ids.append(social.id)
    return social_ids

"""
Account queries and admin edits: listing/search, detail view, manual
edits, deletion.
"""
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Any

from sqlalchemy import or_, select

from profile_directory.models.account import Account
from profile_directory.models.city import City
from profile_directory.models.comment import Comment
from profile_directory.models.favorite import Favorite
from profile_directory.models.rating import Rating
from profile_directory.models.social import Social, SocialType, AccountSocial
from profile_directory.models.tag import Tag, AccountTag
from profile_directory.models.user import User
from profile_directory.imports.reconciler import parse_tags
from profile_directory.services.community import delete_comments
from profile_directory.services.db import find_or_create, insert_ignore

logger = logging.getLogger('services.accounts')


# ── Search ───────────────────────────────────────────────────────────────────

def _years_ago(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:  # Feb 29 → Feb 28
        return today.replace(year=today.year - years, day=28)


def birth_range_for_age(age: int, today: date = None):
    """Inclusive (earliest, latest) birth dates of someone exactly `age` today."""
    today = today or date.today()
    latest = _years_ago(today, age)
    earliest = _years_ago(today, age + 1) + timedelta(days=1)
    return earliest, latest


def parse_date_range(values) -> tuple:
    """
    [start, end] / [start] / [] → (start, end) as dates (or None).
    Raises ValueError on anything else.
    """
    if not isinstance(values, list) or len(values) > 2:
        raise ValueError("date_range must be a JSON array of one or two dates")
    parsed = []
    for value in values:
        if value in (None, ''):
            parsed.append(None)
        elif isinstance(value, str):
            parsed.append(date.fromisoformat(value[:10]))
        else:
            raise ValueError(f"Invalid date in date_range: {value!r}")
    while len(parsed) < 2:
        parsed.append(None)
    return parsed[0], parsed[1]


def search_accounts(session, search: str = None, city_id: int = None, tag_id: int = None,
                    date_range: tuple = (None, None), page: int = 1, limit: int = 40,
                    today: date = None, include_unpublished: bool = False) -> List[Account]:
    """
    Filtered, paginated account list, newest date_of_create first.

    Accounts without a date_of_create are unpublished and left out unless
    include_unpublished is set (moderator view, where they sort last).

    A numeric `search` matches age; any other text matches account name,
    city names and tag names case-insensitively.
    """
    query = session.query(Account).outerjoin(City, Account.city_id == City.id)

    if not include_unpublished:
        query = query.filter(Account.date_of_create.isnot(None))

    if city_id:
        query = query.filter(Account.city_id == city_id)

    if tag_id:
        tagged = select(AccountTag.account_id).where(AccountTag.tag_id == tag_id)
        query = query.filter(Account.id.in_(tagged))

    search = (search or '').strip()
    if search:
        if search.isdigit():
            earliest, latest = birth_range_for_age(int(search), today=today)
            query = query.filter(Account.date_of_birth.between(earliest, latest))
        else:
            pattern = f'%{search}%'
            tagged = (
                select(AccountTag.account_id)
                .join(Tag, Tag.id == AccountTag.tag_id)
                .where(or_(Tag.name_ru.ilike(pattern), Tag.name_eu.ilike(pattern)))
            )
            query = query.filter(or_(
                Account.name.ilike(pattern),
                City.name_ru.ilike(pattern),
                City.name_eu.ilike(pattern),
                Account.id.in_(tagged),
            ))

    start, end = date_range
    if start and end:
        query = query.filter(Account.date_of_create.between(start, end))
    elif start:
        query = query.filter(Account.date_of_create == start)

    page = max(page, 1)
    limit = max(min(limit, 200), 1)
    return (
        query.order_by(Account.date_of_create.desc().nulls_last(), Account.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )


# ── Detail ───────────────────────────────────────────────────────────────────

def build_comment_tree(comments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Nest flat comment dicts under their parents. Orphans are dropped."""
    by_id = {}
    for c in comments:
        c['children'] = []
        by_id[c['id']] = c

    tree = []
    for c in comments:
        if c.get('parent_id') is None:
            tree.append(c)
        else:
            parent = by_id.get(c['parent_id'])
            if parent:
                parent['children'].append(c)
    return tree


def get_account_detail(session, account_id: int) -> Optional[Dict[str, Any]]:
    """Account with its city, tags, socials, ratings and comment tree."""
    account = session.get(Account, account_id)
    if account is None:
        return None

    city = session.get(City, account.city_id) if account.city_id else None

    tags = (
        session.query(Tag)
        .join(AccountTag, AccountTag.tag_id == Tag.id)
        .filter(AccountTag.account_id == account_id)
        .order_by(Tag.id)
        .all()
    )

    socials = (
        session.query(Social, SocialType)
        .join(SocialType, Social.type_social_id == SocialType.id)
        .join(AccountSocial, AccountSocial.socials_id == Social.id)
        .filter(AccountSocial.account_id == account_id)
        .order_by(Social.id)
        .all()
    )

    ratings = session.query(Rating).filter_by(account_id=account_id).all()

    comment_rows = (
        session.query(Comment, User.login)
        .join(User, Comment.user_id == User.id)
        .filter(Comment.account_id == account_id)
        .order_by(Comment.id)
        .all()
    )
    comments = []
    for comment, login in comment_rows:
        d = comment.to_dict()
        d['author_nickname'] = login
        comments.append(d)

    return {
        'account': account.to_dict(include_photo=True),
        'city': city.to_dict() if city else None,
        'tags': [t.to_dict() for t in tags],
        'socials': [
            {
                'id': s.id,
                'type_social_id': s.type_social_id,
                'text': s.text,
                'social_name': t.name,
            }
            for s, t in socials
        ],
        'rating': [r.to_dict() for r in ratings],
        'comments': build_comment_tree(comments),
    }


# ── Edits ────────────────────────────────────────────────────────────────────

def _city_for_edit(session, name: str) -> int:
    """Manual edits match a city by either locale before creating one."""
    city = session.query(City).filter(or_(City.name_ru == name, City.name_eu == name)).first()
    if city is None:
        city, _ = find_or_create(session, City, defaults={'name_eu': name}, name_ru=name)
    return city.id


def _tag_for_edit(session, name: str) -> int:
    tag = session.query(Tag).filter(or_(Tag.name_ru == name, Tag.name_eu == name)).first()
    if tag is None:
        tag, _ = find_or_create(session, Tag, defaults={'name_eu': name}, name_ru=name)
    return tag.id


def update_account(session, account_id: int, name: str = None,
                   city: str = None, tags: str = None) -> bool:
    """
    Apply a moderator edit in one transaction. Returns False if the account
    does not exist.

    tags=None leaves tags alone; any string (even empty) replaces the
    account's tag set with exactly those tags.
    """
    try:
        account = session.get(Account, account_id)
        if account is None:
            return False

        if name:
            account.name = name

        if city and city.strip():
            account.city_id = _city_for_edit(session, city.strip())

        if tags is not None:
            wanted = [_tag_for_edit(session, t) for t in parse_tags(tags)]
            for tag_id in wanted:
                insert_ignore(session, AccountTag,
                              {'tag_id': tag_id, 'account_id': account_id},
                              ('tag_id', 'account_id'))
            stale = session.query(AccountTag).filter(AccountTag.account_id == account_id)
            if wanted:
                stale = stale.filter(AccountTag.tag_id.notin_(wanted))
            removed = stale.delete(synchronize_session=False)
            if removed:
                logger.info("Detached %d tag(s) from account %s", removed, account_id)

        session.commit()
        return True
    except Exception:
        session.rollback()
        raise


def set_create_date(session, account_id: int, new_date: Optional[date]) -> Optional[Account]:
    """Publish (or unpublish with None) an account. Returns the account or None."""
    account = session.get(Account, account_id)
    if account is None:
        return None
    account.date_of_create = new_date
    session.commit()
    return account


def delete_account(session, account_id: int) -> Optional[str]:
    """Delete the account and every row hanging off it. Returns its identificator."""
    try:
        account = session.get(Account, account_id)
        if account is None:
            return None
        identificator = account.identificator

        for model, column in (
            (AccountTag, AccountTag.account_id),
            (AccountSocial, AccountSocial.account_id),
            (Favorite, Favorite.accounts_id),
            (Rating, Rating.account_id),
        ):
            session.query(model).filter(column == account_id).delete(synchronize_session=False)

        threads = [cid for (cid,) in session.query(Comment.id).filter(Comment.account_id == account_id).all()]
        delete_comments(session, threads)

        session.delete(account)
        session.commit()
        return identificator
    except Exception:
        session.rollback()
        raise

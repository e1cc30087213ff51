#!/usr/bin/env python3
"""
Seed a local database with a small directory for trying the API.

Creates tables (SQLite local dev), the social network types, a couple of
users, and then runs a sample dump through the real import pipeline so
cities, tags, socials and media folders are produced the same way an upload
would produce them. Finishes with a comment thread, a favorite and a rating.

Usage:
    python scripts/seed_test_data.py            # seed
    python scripts/seed_test_data.py --clear    # wipe seeded data first
    python scripts/seed_test_data.py --dump path/to/dump.txt

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from profile_directory import create_app, config
from profile_directory.database import get_session, engine, Base
from profile_directory.imports.orchestrator import import_dump
from profile_directory.models.account import Account
from profile_directory.models.comment import Comment
from profile_directory.models.favorite import Favorite
from profile_directory.models.message import Message
from profile_directory.models.order import Order
from profile_directory.models.rating import Rating
from profile_directory.models.social import SocialType
from profile_directory.models.user import User
from profile_directory.services.accounts import delete_account
from profile_directory.services.db import find_or_create
from profile_directory.services.users import delete_user


# Prefix for seeded identifiers so we can clear them
SEED_PREFIX = 'seed-'

SAMPLE_DUMP = f"""
<title>Anna</title><id>{SEED_PREFIX}anna</id><dr>25</dr><city>Москва</city>
<tags>travel, yoga</tags><nvideo>1</nvideo>
<tg>@anna</tg><insta>anna.travels</insta><date>2024.03.01</date>

<title>Boris</title><id>{SEED_PREFIX}boris</id><dr>31</dr><city>Казань</city>
<tags>music</tags><tel>+7 900 000-00-00</tel><date></date>

<title>Vera</title><id>{SEED_PREFIX}vera</id><dr>22</dr><city>Москва</city>
<tags>yoga, dance</tags><tg>@vera</tg><email>vera@example.com</email>
<date>2024-05-17</date>
""".strip()

USERS = [
    {'login': f'{SEED_PREFIX}moderator', 'email': 'moderator@example.com', 'role': 'admin'},
    {'login': f'{SEED_PREFIX}reader', 'email': 'reader@example.com', 'role': 'user'},
]


def seed_social_types(session):
    for identificator, name in config.SOCIAL_TYPES.items():
        find_or_create(session, SocialType, defaults={'name': name}, identificator=identificator)
    session.commit()
    print(f'  Social types:  {len(config.SOCIAL_TYPES)}')


def seed_users(session):
    users = []
    for u in USERS:
        user, _ = find_or_create(session, User, defaults={'email': u['email'], 'role': u['role']}, login=u['login'])
        users.append(user)
    session.commit()
    print(f'  Users:         {len(users)}')
    return users


def seed_accounts(dump: bytes):
    result = import_dump(dump, filename='seed_dump.txt')
    print(f'  Import run:    {result.run_id} '
          f'({result.imported} imported, {result.failed} failed of {result.records_found})')
    return result


def seed_community(session, users):
    moderator, reader = users
    anna = session.query(Account).filter_by(identificator=f'{SEED_PREFIX}anna').one()

    question = Comment(account_id=anna.id, user_id=reader.id, text='Is this profile still active?')
    session.add(question)
    session.flush()
    session.add(Comment(account_id=anna.id, user_id=moderator.id, parent_id=question.id,
                        text='Yes, checked last week.'))
    session.add(Favorite(accounts_id=anna.id, users_id=reader.id, comment='check later'))
    session.add(Rating(account_id=anna.id, users_id=reader.id, rate=5))
    session.add(Message(user_from_id=reader.id, user_to_id=moderator.id, text='Could you add a photo of Anna?'))
    session.add(Order(user_id=reader.id, text='Please add more accounts from Kazan', type='add'))
    session.commit()
    print('  Community:     2 comments, 1 favorite, 1 rating, 1 message, 1 order')


def clear_seeded_data(session):
    """Remove seeded accounts (and every row hanging off them) and users."""
    accounts = session.query(Account).filter(Account.identificator.startswith(SEED_PREFIX)).all()
    for account_id in [a.id for a in accounts]:
        delete_account(session, account_id)

    user_ids = [u.id for u in session.query(User).filter(User.login.startswith(SEED_PREFIX)).all()]
    for user_id in user_ids:
        delete_user(session, user_id)
    session.commit()

    print(f'Cleared {len(accounts)} accounts, {len(user_ids)} users.')


def main():
    parser = argparse.ArgumentParser(description='Seed a local profile directory')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    parser.add_argument('--dump', help='Import this dump file instead of the built-in sample')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        # Ensure tables exist (for SQLite local dev)
        Base.metadata.create_all(engine)

        session = get_session()
        try:
            if args.clear or args.clear_only:
                clear_seeded_data(session)
                if args.clear_only:
                    return

            print('Seeding test data...')
            seed_social_types(session)
            users = seed_users(session)
            if args.dump:
                with open(args.dump, 'rb') as f:
                    seed_accounts(f.read())
            else:
                seed_accounts(SAMPLE_DUMP.encode('utf-8'))
                seed_community(session, users)
            print('\nDone! Try http://localhost:5000/accounts')

        except Exception as e:
            session.rollback()
            print(f'Error: {e}')
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()

"""Shared test fixtures."""
import pytest
from contextlib import ExitStack
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from profile_directory.database import Base
from profile_directory.config import SOCIAL_TYPES


# Modules that do `from profile_directory.database import get_session`, so the
# local binding has to be patched in each of them.
SESSION_USERS = [
    'profile_directory.database',
    'profile_directory.services.db',
    'profile_directory.imports.orchestrator',
    'profile_directory.routes.accounts',
    'profile_directory.routes.lookups',
    'profile_directory.routes.community',
    'profile_directory.routes.messages',
    'profile_directory.routes.reports',
    'profile_directory.routes.orders',
    'profile_directory.routes.sections',
    'profile_directory.routes.users',
]


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import profile_directory.models.account
    import profile_directory.models.city
    import profile_directory.models.tag
    import profile_directory.models.social
    import profile_directory.models.user
    import profile_directory.models.comment
    import profile_directory.models.favorite
    import profile_directory.models.rating
    import profile_directory.models.import_run
    import profile_directory.models.message
    import profile_directory.models.report
    import profile_directory.models.order
    import profile_directory.models.section
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    We disable close() so that route handlers and import helpers calling
    session.close() in their finally blocks don't invalidate the shared
    test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with ExitStack() as stack:
        for module in SESSION_USERS:
            stack.enter_context(patch(f'{module}.get_session', return_value=db_session))
        yield db_session
    db_session.close = _real_close


@pytest.fixture(autouse=True)
def local_storage(tmp_path):
    """Process-wide storage pointed at a temp dir, restored afterwards."""
    from profile_directory.extensions import set_storage
    from profile_directory.services.storage import LocalStorage
    storage = LocalStorage(str(tmp_path / 'fileBase'), public_prefix='/fileBase',
                           base_url='https://files.test')
    previous = set_storage(storage)
    yield storage
    set_storage(previous)


@pytest.fixture
def social_types(db_session):
    """socials_type rows as the migration seeds them. Returns identificator → id."""
    from profile_directory.models.social import SocialType
    for identificator, name in SOCIAL_TYPES.items():
        db_session.add(SocialType(identificator=identificator, name=name))
    db_session.commit()
    return {t.identificator: t.id for t in db_session.query(SocialType).all()}


@pytest.fixture
def app():
    """Flask test app with the admin gate open."""
    from profile_directory import create_app
    with patch('profile_directory.config.ADMIN_PASSWORD', None):
        app = create_app()
        app.config['TESTING'] = True
        yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_account(db_session):
    """Factory fixture: inserts an Account with sensible defaults."""
    from profile_directory.models.account import Account
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        defaults = dict(
            identificator=f'acc-{counter["n"]:03d}',
            name=f'Account {counter["n"]}',
            check_video=False,
        )
        defaults.update(overrides)
        account = Account(**defaults)
        db_session.add(account)
        db_session.commit()
        return account
    return _make


@pytest.fixture
def make_user(db_session):
    """Factory fixture: inserts a User."""
    from profile_directory.models.user import User
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        defaults = dict(login=f'user{counter["n"]}', email=f'user{counter["n"]}@example.com')
        defaults.update(overrides)
        user = User(**defaults)
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def sample_dump():
    """A small tagged-text dump resembling real uploads."""
    return (
        "export 2024-03\n"
        "<title>Anna</title><id>a-101</id><dr>25</dr><city>Moscow</city>\n"
        "<tags>travel, yoga</tags><nvideo>1</nvideo>\n"
        "<tg>@anna</tg><tg>@anna</tg><insta>anna.travels</insta><date>2024.03.01</date>\n"
        "<title>Boris</title><id>b-202</id><dr>31</dr><city>Kazan</city>\n"
        "<tags>music</tags><tel>+7 900 000-00-00</tel><date></date>\n"
    ).encode('utf-8')

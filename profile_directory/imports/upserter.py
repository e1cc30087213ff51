"""
Account upsert: insert or update one Account by its dump identifier.

Derived fields:
  date_of_birth  ← current year minus <dr>, pinned to January 1st
  check_video    ← <nvideo> is exactly "1"
  date_of_create ← <date> normalized, see resolve_create_date()
"""
import logging
import re
from datetime import date
from typing import Optional

from profile_directory import config
from profile_directory.imports.base import RawRecord
from profile_directory.models.account import Account

logger = logging.getLogger('imports.upserter')

MISSING_DATE_POLICIES = ('null', 'now')

# YYYY.MM.DD or YYYY-MM-DD, optionally followed by a time part we ignore
_DATE_RE = re.compile(r'^\s*(\d{4})[.\-](\d{1,2})[.\-](\d{1,2})(?:[T\s].*)?$')

MAX_AGE = 150


def birth_date_from_age(age_token: Optional[str], today: date = None) -> Optional[date]:
    """'25' in 2026 → 2001-01-01. Unparseable or implausible ages → None."""
    if not age_token:
        return None
    try:
        age = int(age_token.strip())
    except (ValueError, AttributeError):
        logger.debug("Ignoring non-numeric age %r", age_token)
        return None
    if age < 0 or age > MAX_AGE:
        logger.debug("Ignoring out-of-range age %r", age_token)
        return None
    today = today or date.today()
    return date(today.year - age, 1, 1)


def video_flag(nvideo_token: Optional[str]) -> bool:
    return (nvideo_token or '').strip() == '1'


def normalize_date(token: Optional[str]) -> Optional[date]:
    """
    Parse a dump date token into a calendar date.

    Accepts YYYY.MM.DD and YYYY-MM-DD with year 1900-2100. Anything else,
    including impossible days like 2024-02-31, degrades to None.
    """
    if not token:
        return None
    m = _DATE_RE.match(token)
    if not m:
        logger.debug("Unrecognized date token %r", token)
        return None
    year, month, day = (int(g) for g in m.groups())
    if not (1900 <= year <= 2100 and 1 <= month <= 12 and 1 <= day <= 31):
        logger.debug("Date token out of range %r", token)
        return None
    try:
        return date(year, month, day)
    except ValueError:
        logger.debug("Date token is not a real day %r", token)
        return None


def resolve_create_date(record: RawRecord, policy: str = None, today: date = None) -> Optional[date]:
    """
    Three-way date_of_create rule:

      <date>2024.03.01</date>  → 2024-03-01
      <date></date>            → None (explicitly unpublished)
      no <date> tag            → IMPORT_MISSING_DATE_POLICY: None for "null",
                                 today for "now"
    """
    if record.has_date_tag:
        return normalize_date(record.date)

    policy = (policy or config.IMPORT_MISSING_DATE_POLICY).lower()
    if policy not in MISSING_DATE_POLICIES:
        raise ValueError(f"Unknown missing-date policy: {policy!r}")
    if policy == 'now':
        return today or date.today()
    return None


def upsert_account(session, record: RawRecord, city_id: Optional[int],
                   policy: str = None, today: date = None):
    """
    INSERT or UPDATE the account for `record`. Returns (account, created).

    The row id stays stable across re-imports; nothing is committed here.
    """
    fields = dict(
        name=record.title or '',
        check_video=video_flag(record.nvideo),
        city_id=city_id,
        date_of_create=resolve_create_date(record, policy=policy, today=today),
        date_of_birth=birth_date_from_age(record.dr, today=today),
    )

    account = session.query(Account).filter_by(identificator=record.identificator).first()
    created = account is None
    if created:
        account = Account(identificator=record.identificator, **fields)
        session.add(account)
    else:
        for key, value in fields.items():
            setattr(account, key, value)

    session.flush()  # get account.id
    logger.debug("%s account %s (id=%s)", 'Inserted' if created else 'Updated',
                 record.identificator, account.id)
    return account, created

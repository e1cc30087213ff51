"""Tests for profile_directory.imports.upserter -- derived fields + account upsert."""
from datetime import date

import pytest

from profile_directory.imports.base import RawRecord
from profile_directory.imports.upserter import (
    birth_date_from_age,
    video_flag,
    normalize_date,
    resolve_create_date,
    upsert_account,
)
from profile_directory.models.account import Account

TODAY = date(2026, 5, 1)


class TestBirthDateFromAge:

    def test_pins_to_january_first(self):
        assert birth_date_from_age('25', today=TODAY) == date(2001, 1, 1)

    def test_surrounding_whitespace(self):
        assert birth_date_from_age(' 30 ', today=TODAY) == date(1996, 1, 1)

    def test_zero_age(self):
        assert birth_date_from_age('0', today=TODAY) == date(2026, 1, 1)

    @pytest.mark.parametrize('token', [None, '', 'abc', '25 years', '-1', '151'])
    def test_unusable_tokens_give_none(self, token):
        assert birth_date_from_age(token, today=TODAY) is None


class TestVideoFlag:

    @pytest.mark.parametrize('token,expected', [
        ('1', True),
        (' 1 ', True),
        ('0', False),
        ('11', False),
        ('yes', False),
        ('', False),
        (None, False),
    ])
    def test_only_exact_one_is_true(self, token, expected):
        assert video_flag(token) is expected


class TestNormalizeDate:

    def test_dotted(self):
        assert normalize_date('2024.03.01') == date(2024, 3, 1)

    def test_dashed_single_digits(self):
        assert normalize_date('2024-3-5') == date(2024, 3, 5)

    def test_time_part_is_ignored(self):
        assert normalize_date('2024-03-01 12:30:00') == date(2024, 3, 1)
        assert normalize_date('2024-03-01T12:30:00') == date(2024, 3, 1)

    @pytest.mark.parametrize('token', [
        None, '', 'soon', '01.03.2024', '2024/03/01', '2024-02-31', '2024-13-01', '1800.01.01',
    ])
    def test_malformed_gives_none(self, token):
        assert normalize_date(token) is None


class TestResolveCreateDate:

    def test_present_date_is_normalized(self):
        record = RawRecord(identificator='x', date='2024.03.01')
        assert resolve_create_date(record, policy='now', today=TODAY) == date(2024, 3, 1)

    def test_empty_date_tag_is_null_even_with_now_policy(self):
        record = RawRecord(identificator='x', date='')
        assert resolve_create_date(record, policy='now', today=TODAY) is None

    def test_missing_tag_null_policy(self):
        record = RawRecord(identificator='x')
        assert resolve_create_date(record, policy='null', today=TODAY) is None

    def test_missing_tag_now_policy(self):
        record = RawRecord(identificator='x')
        assert resolve_create_date(record, policy='now', today=TODAY) == TODAY

    def test_policy_is_case_insensitive(self):
        record = RawRecord(identificator='x')
        assert resolve_create_date(record, policy='NOW', today=TODAY) == TODAY

    def test_unknown_policy_raises(self):
        with pytest.raises(ValueError):
            resolve_create_date(RawRecord(identificator='x'), policy='sometimes')


class TestUpsertAccount:

    def test_inserts_new_account(self, db_session):
        record = RawRecord(identificator='a-1', title='Anna', dr='25', nvideo='1', date='2024.03.01')
        account, created = upsert_account(db_session, record, city_id=None, policy='null', today=TODAY)
        assert created is True
        assert account.id is not None
        assert account.name == 'Anna'
        assert account.date_of_birth == date(2001, 1, 1)
        assert account.check_video is True
        assert account.date_of_create == date(2024, 3, 1)

    def test_updates_existing_account_in_place(self, db_session):
        first, _ = upsert_account(db_session, RawRecord(identificator='a-1', title='Anna'),
                                  city_id=None, policy='null', today=TODAY)
        second, created = upsert_account(
            db_session, RawRecord(identificator='a-1', title='Anna K', nvideo='0'),
            city_id=None, policy='null', today=TODAY,
        )
        assert created is False
        assert second.id == first.id
        assert second.name == 'Anna K'
        assert db_session.query(Account).count() == 1

    def test_missing_title_stores_empty_name(self, db_session):
        account, _ = upsert_account(db_session, RawRecord(identificator='a-2'),
                                    city_id=None, policy='null', today=TODAY)
        assert account.name == ''

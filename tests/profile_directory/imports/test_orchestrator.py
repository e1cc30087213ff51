"""Tests for profile_directory.imports.orchestrator -- whole-dump import."""
import os
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from profile_directory.imports.base import NoRecordsFoundError, EmptyInputError
from profile_directory.imports import orchestrator
from profile_directory.imports.orchestrator import import_dump, provision_storage
from profile_directory.models.account import Account
from profile_directory.models.city import City
from profile_directory.models.import_run import ImportRun
from profile_directory.models.social import Social, AccountSocial
from profile_directory.models.tag import Tag, AccountTag

TODAY = date(2026, 5, 1)


def _counts(session):
    return {
        model.__tablename__: session.query(model).count()
        for model in (Account, City, Tag, AccountTag, Social, AccountSocial)
    }


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

class TestImportDump:
    """import_dump() runs a dump end to end and reports per-record outcomes."""

    def test_imports_every_record(self, db_session, social_types, sample_dump, local_storage):
        result = import_dump(sample_dump, filename='dump.txt', storage=local_storage,
                             policy='null', today=TODAY)
        assert result.success is True
        assert result.records_found == 2
        assert result.imported == 2
        assert result.failed == 0

    def test_account_fields(self, db_session, social_types, sample_dump, local_storage):
        import_dump(sample_dump, storage=local_storage, policy='null', today=TODAY)
        anna = db_session.query(Account).filter_by(identificator='a-101').one()
        assert anna.name == 'Anna'
        assert anna.date_of_birth == date(2001, 1, 1)
        assert anna.check_video is True
        assert anna.date_of_create == date(2024, 3, 1)
        assert db_session.get(City, anna.city_id).name_ru == 'Moscow'

    def test_empty_date_tag_leaves_account_unpublished(self, db_session, social_types,
                                                       sample_dump, local_storage):
        import_dump(sample_dump, storage=local_storage, policy='now', today=TODAY)
        boris = db_session.query(Account).filter_by(identificator='b-202').one()
        assert boris.date_of_create is None

    def test_missing_date_follows_policy(self, db_session, local_storage):
        dump = b'<title>C</title><id>c-1</id>'
        import_dump(dump, storage=local_storage, policy='now', today=TODAY)
        assert db_session.query(Account).filter_by(identificator='c-1').one().date_of_create == TODAY

    def test_missing_date_null_policy(self, db_session, local_storage):
        import_dump(b'<title>C</title><id>c-1</id>', storage=local_storage, policy='null', today=TODAY)
        assert db_session.query(Account).filter_by(identificator='c-1').one().date_of_create is None

    def test_duplicate_handles_in_record_link_once(self, db_session, social_types,
                                                   sample_dump, local_storage):
        import_dump(sample_dump, storage=local_storage, policy='null', today=TODAY)
        anna = db_session.query(Account).filter_by(identificator='a-101').one()
        assert db_session.query(AccountSocial).filter_by(account_id=anna.id).count() == 2

    def test_tag_list_is_deduplicated(self, db_session, local_storage):
        import_dump(b'<title>A</title><id>a</id><tags>a, b ,a</tags>',
                    storage=local_storage, policy='null', today=TODAY)
        assert sorted(t.name_ru for t in db_session.query(Tag).all()) == ['a', 'b']
        assert db_session.query(AccountTag).count() == 2

    def test_reimport_changes_nothing(self, db_session, social_types, sample_dump, local_storage):
        import_dump(sample_dump, storage=local_storage, policy='null', today=TODAY)
        before = _counts(db_session)
        ids_before = {a.identificator: a.id for a in db_session.query(Account).all()}

        result = import_dump(sample_dump, storage=local_storage, policy='null', today=TODAY)

        assert result.imported == 2
        assert _counts(db_session) == before
        assert {a.identificator: a.id for a in db_session.query(Account).all()} == ids_before

    def test_reimport_updates_fields(self, db_session, local_storage):
        import_dump(b'<title>Old</title><id>x</id><dr>20</dr>', storage=local_storage,
                    policy='null', today=TODAY)
        import_dump(b'<title>New</title><id>x</id><dr>21</dr>', storage=local_storage,
                    policy='null', today=TODAY)
        account = db_session.query(Account).filter_by(identificator='x').one()
        assert account.name == 'New'
        assert account.date_of_birth == date(2005, 1, 1)

    def test_cp1251_dump(self, db_session, local_storage):
        dump = '<title>Анна</title><id>a-1</id><city>Казань</city>'.encode('cp1251')
        import_dump(dump, storage=local_storage, policy='null', today=TODAY)
        account = db_session.query(Account).filter_by(identificator='a-1').one()
        assert account.name == 'Анна'
        assert db_session.get(City, account.city_id).name_ru == 'Казань'

    def test_unknown_policy_raises_before_touching_data(self, db_session, sample_dump):
        with pytest.raises(ValueError):
            import_dump(sample_dump, policy='sometimes')
        assert db_session.query(ImportRun).count() == 0


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestImportDumpFailures:

    def test_no_records_writes_nothing(self, db_session, local_storage):
        with pytest.raises(NoRecordsFoundError):
            import_dump(b'<city>Kazan</city> no records here', storage=local_storage, policy='null')
        assert db_session.query(Account).count() == 0
        assert db_session.query(City).count() == 0

    def test_empty_file_raises(self, db_session, local_storage):
        with pytest.raises(EmptyInputError):
            import_dump(b'   ', storage=local_storage, policy='null')

    def test_rejected_dump_is_audited_as_failed(self, db_session, local_storage):
        with pytest.raises(NoRecordsFoundError):
            import_dump(b'nothing', filename='bad.txt', storage=local_storage, policy='null')
        run = db_session.query(ImportRun).one()
        assert run.status == 'failed'
        assert run.filename == 'bad.txt'
        assert run.errors[-1]['message'] == 'Нет данных аккаунтов в файле'

    def test_failing_record_is_rolled_back_and_batch_continues(self, db_session, local_storage):
        dump = (
            b'<title>A</title><id>a</id><tags>fine</tags>'
            b'<title>B</title><id>b</id><tags>boom</tags>'
            b'<title>C</title><id>c</id><tags>fine</tags>'
        )
        real_attach = orchestrator.attach_tags

        def flaky_attach(session, account_id, raw_tags):
            if raw_tags == 'boom':
                raise RuntimeError('tag store unavailable')
            return real_attach(session, account_id, raw_tags)

        with patch('profile_directory.imports.orchestrator.attach_tags', side_effect=flaky_attach):
            result = import_dump(dump, storage=local_storage, policy='null', today=TODAY)

        assert result.imported == 2
        assert result.failed == 1
        assert result.success is False
        assert result.errors == [{'identificator': 'b', 'message': 'tag store unavailable'}]
        assert sorted(a.identificator for a in db_session.query(Account).all()) == ['a', 'c']
        assert not os.path.isdir(os.path.join(local_storage.root, 'b'))

    def test_unexpected_error_is_audited_and_reraised(self, db_session, local_storage, sample_dump):
        with patch('profile_directory.imports.orchestrator.social_type_ids',
                   side_effect=RuntimeError('db gone')):
            with pytest.raises(RuntimeError):
                import_dump(sample_dump, storage=local_storage, policy='null')
        run = db_session.query(ImportRun).one()
        assert run.status == 'failed'


# ---------------------------------------------------------------------------
# Audit + storage
# ---------------------------------------------------------------------------

class TestImportRunAudit:

    def test_completed_run_recorded(self, db_session, social_types, sample_dump, local_storage):
        result = import_dump(sample_dump, filename='dump.txt', storage=local_storage,
                             policy='null', today=TODAY)
        run = db_session.get(ImportRun, result.run_id)
        assert run.status == 'completed'
        assert run.records_found == 2
        assert run.imported == 2
        assert run.failed == 0
        assert run.finished_at is not None

    def test_result_to_dict(self, db_session, sample_dump, local_storage):
        result = import_dump(sample_dump, storage=local_storage, policy='null', today=TODAY)
        data = result.to_dict()
        assert data['success'] is True
        assert data['run_id'] == result.run_id
        assert data['records_found'] == 2
        assert data['errors'] == []


class TestProvisionStorage:

    def test_folder_created_per_record(self, db_session, sample_dump, local_storage):
        import_dump(sample_dump, storage=local_storage, policy='null', today=TODAY)
        assert local_storage.exists('a-101')
        assert local_storage.exists('b-202')

    def test_storage_failure_does_not_fail_record(self, db_session, sample_dump):
        storage = MagicMock()
        storage.create_directory.side_effect = OSError('disk full')
        result = import_dump(sample_dump, storage=storage, policy='null', today=TODAY)
        assert result.imported == 2
        assert result.failed == 0
        assert storage.create_directory.call_count == 2

    def test_default_storage_comes_from_extensions(self, db_session, sample_dump, local_storage):
        import_dump(sample_dump, policy='null', today=TODAY)
        assert local_storage.exists('a-101')

    def test_provision_without_storage_is_noop(self):
        provision_storage(None, 'a-101')

    def test_provision_swallows_errors(self):
        storage = MagicMock()
        storage.create_directory.side_effect = RuntimeError('boom')
        provision_storage(storage, 'a-101', run_id='r1')
        storage.create_directory.assert_called_once_with('a-101')

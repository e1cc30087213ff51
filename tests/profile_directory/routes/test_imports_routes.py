"""Tests for /upload-file and the /api/imports history endpoints."""
import io

import pytest
from unittest.mock import patch

from profile_directory.models.account import Account


def _upload(client, data, filename='dump.txt'):
    return client.post(
        '/upload-file',
        data={'file': (io.BytesIO(data), filename)},
        content_type='multipart/form-data',
    )


class TestUploadFile:
    """POST /upload-file imports a dump and returns the batch summary."""

    def test_imports_dump(self, client, db_session, social_types, sample_dump):
        resp = _upload(client, sample_dump)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['success'] is True
        assert data['records_found'] == 2
        assert data['imported'] == 2
        assert data['failed'] == 0
        assert 'run_id' in data
        assert db_session.query(Account).count() == 2

    def test_missing_file_400(self, client):
        resp = client.post('/upload-file', data={}, content_type='multipart/form-data')
        assert resp.status_code == 400
        assert resp.get_json() == {'error': 'Файл не найден'}

    def test_empty_file_500_with_reason(self, client):
        resp = _upload(client, b'')
        assert resp.status_code == 500
        data = resp.get_json()
        assert data['error'] == 'Ошибка сервера'
        assert data['message'] == 'Файл пустой или не найден'

    def test_no_records_500_with_reason(self, client, db_session):
        resp = _upload(client, b'<city>Kazan</city>')
        assert resp.status_code == 500
        assert resp.get_json()['message'] == 'Нет данных аккаунтов в файле'
        assert db_session.query(Account).count() == 0

    def test_unexpected_error_500(self, client):
        with patch('profile_directory.routes.imports.import_dump', side_effect=RuntimeError('boom')):
            resp = _upload(client, b'<title>A</title><id>a</id>')
        assert resp.status_code == 500
        assert resp.get_json()['message'] == 'boom'

    def test_partial_failure_reported(self, client, db_session):
        with patch('profile_directory.imports.orchestrator.attach_tags',
                   side_effect=RuntimeError('tag store unavailable')):
            resp = _upload(client, b'<title>A</title><id>a</id><tags>x</tags>')
        data = resp.get_json()
        assert resp.status_code == 200
        assert data['success'] is False
        assert data['failed'] == 1
        assert data['errors'][0]['identificator'] == 'a'

    def test_creates_media_folders(self, client, sample_dump, local_storage):
        _upload(client, sample_dump)
        assert local_storage.exists('a-101')


class TestImportHistory:
    """GET /api/imports and /api/imports/<run_id>."""

    def test_lists_runs(self, client, sample_dump):
        run_id = _upload(client, sample_dump).get_json()['run_id']
        resp = client.get('/api/imports')
        assert resp.status_code == 200
        runs = resp.get_json()
        assert [r['id'] for r in runs] == [run_id]
        assert runs[0]['status'] == 'completed'
        assert runs[0]['filename'] == 'dump.txt'

    def test_get_run(self, client, sample_dump):
        run_id = _upload(client, sample_dump).get_json()['run_id']
        resp = client.get(f'/api/imports/{run_id}')
        assert resp.status_code == 200
        assert resp.get_json()['imported'] == 2

    def test_unknown_run_404(self, client):
        resp = client.get('/api/imports/does-not-exist')
        assert resp.status_code == 404
